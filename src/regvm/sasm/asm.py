import logging as lg

import regvm.sasm.grammar as grammar
from regvm.sasm.fpp import FPP


class CompilationItem:
    modulename: str = '<inline>'
    contents: str

    def __init__(self, contents: str = '', modulename: str | None = None):
        self.contents = contents

        if modulename is not None:
            self.modulename = modulename


def compile_items(compile_items: list[CompilationItem], extended: bool = False) -> bytes:
    first_pass = FPP(extended=extended)

    for compile_item in compile_items:
        lg.info(f'Processing {compile_item.modulename}')
        first_pass.namespace = compile_item.modulename
        actions = grammar.program.parse_string(compile_item.contents, parse_all=True)

        for (func, arg) in actions:  # type: ignore
            func(first_pass, arg)

    bytestr = bytearray()

    for (_, d) in first_pass.cmd_list:
        bytestr += d

    lg.debug(f'Assembled {len(bytestr)} bytes')
    return bytes(bytestr)


def compile_string(contents: str, extended: bool = False) -> bytes:
    return compile_items([CompilationItem(contents)], extended=extended)
