"""
LLVM backend for generated size functions.

Every accepted type gets one function

    define {i1, i64} @"<Type>.exact_size"()

returning `{1, n}` when all values of the type encode to exactly `n` bytes and
`{0, 0}` when the size depends on the value. Rejected types get no function,
so a codec linking against the module fails to resolve them.

API:
    from exactsize.backend.codegen_llvm import LLVMSizeCodegen
    cg = LLVMSizeCodegen()
    cg.build_module(results)
    ir_text = str(cg.module)
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, Iterable, Optional

from llvmlite import ir

from exactsize.internals.errors import raise_internal_error
from exactsize.semantics.analyzer import SizeAnalysis
from exactsize.semantics.type_sizes import SizeResult
from exactsize.semantics.passes.exact_size import MAX_EXACT_SIZE

INT1_BIT_WIDTH = 1
INT64_BIT_WIDTH = 64

EXACT_SIZE_SUFFIX = ".exact_size"


def size_function_name(type_name: str) -> str:
    return f"{type_name}{EXACT_SIZE_SUFFIX}"


class LLVMSizeCodegen:
    """Emits one `exact_size` function per accepted declared type."""

    def __init__(self, module_name: str = "exactsize_module") -> None:
        self.module: ir.Module = ir.Module(name=module_name)
        self.i1 = ir.IntType(INT1_BIT_WIDTH)
        self.i64 = ir.IntType(INT64_BIT_WIDTH)
        # Maybe<i64>-style result: {is_some, value}
        self.size_result = ir.LiteralStructType([self.i1, self.i64])
        self.funcs: Dict[str, ir.Function] = {}

    def size_constant(self, size: SizeResult) -> ir.Constant:
        if size is None:
            return ir.Constant(self.size_result, [ir.Constant(self.i1, 0), ir.Constant(self.i64, 0)])
        if not 0 <= size <= MAX_EXACT_SIZE:
            raise_internal_error("SZ9001", message=f"size {size} does not fit in 64 bits")
        # i64 carries the u64 bit pattern
        value = size - 2**64 if size >= 2**63 else size
        return ir.Constant(self.size_result, [ir.Constant(self.i1, 1), ir.Constant(self.i64, value)])

    def emit_size_function(self, type_name: str, size: SizeResult) -> ir.Function:
        fnty = ir.FunctionType(self.size_result, [])
        func = ir.Function(self.module, fnty, name=size_function_name(type_name))
        block = func.append_basic_block(name="entry")
        builder = ir.IRBuilder(block)
        builder.ret(self.size_constant(size))
        self.funcs[type_name] = func
        return func

    def build_module(self, results: Iterable[SizeAnalysis]) -> ir.Module:
        for result in results:
            if result.rejected or result.decl.name in self.funcs:
                continue
            self.emit_size_function(result.decl.name, result.size)
        return self.module

    def get_function(self, type_name: str) -> Optional[ir.Function]:
        return self.funcs.get(type_name)

    def write_ll(self, path: Path) -> None:
        path.write_text(str(self.module), encoding="utf-8")
