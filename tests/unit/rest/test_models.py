from __future__ import annotations

import unittest

from ceview.models import AsmDoc, CompileResult, Compiler, Formatter, FormatResult, Language


class ModelParsingTests(unittest.TestCase):
    def test_language_tolerates_missing_fields(self) -> None:
        lang = Language.from_json({"id": "rust", "extensions": [".rs", 3]})

        self.assertEqual(lang, Language(id="rust", name="", extensions=(".rs",)))

    def test_compiler_maps_camel_case_fields(self) -> None:
        compiler = Compiler.from_json(
            {"id": "r1740", "name": "rustc 1.74.0", "lang": "rust", "compilerType": "", "instructionSet": "amd64", "semver": "1.74.0"}
        )

        self.assertEqual(compiler.instruction_set, "amd64")
        self.assertEqual(compiler.semver, "1.74.0")

    def test_formatter_styles(self) -> None:
        formatter = Formatter.from_json({"type": "clangformat", "name": "clang-format", "styles": ["Google", "LLVM"]})

        self.assertEqual(formatter.styles, ("Google", "LLVM"))
        self.assertEqual(Formatter.from_json({"type": "rustfmt", "name": "rustfmt"}).styles, ())

    def test_compile_result_defaults(self) -> None:
        result = CompileResult.from_json({"code": True, "asm": "nope", "stderr": [{"text": "x"}, "y"]})

        self.assertEqual(result.code, 0)
        self.assertEqual(result.asm, [])
        self.assertEqual(result.stderr, [{"text": "x"}])
        self.assertEqual(result.stdout, [])

    def test_format_result_exit_code(self) -> None:
        self.assertEqual(FormatResult.from_json({"answer": "a\nb", "exit": 2}).exit_code, 2)
        self.assertEqual(FormatResult.from_json({}).lines, [""])

    def test_asm_doc(self) -> None:
        self.assertEqual(AsmDoc.from_json({"tooltip": "Add"}), AsmDoc(tooltip="Add"))


if __name__ == "__main__":
    unittest.main()
