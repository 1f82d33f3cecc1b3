from exactsize.compiler.cli import main

raise SystemExit(main())
