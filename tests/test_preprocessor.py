import unittest

from automaton_studio.errors import CommandSyntaxError, PreprocessorError
from automaton_studio.preprocessor import (
    describe_directive,
    directive_names,
    preprocess,
    tokenize,
)


class TestRewriting(unittest.TestCase):
    def test_punctuation_becomes_separate_tokens(self):
        self.assertEqual(preprocess("add x,y;"), "add x , y;\n")
        self.assertEqual(preprocess("connect x->a:y"), "connect x -> a : y;\n")
        self.assertEqual(tokenize("connect x to a:y,b:x"), [
            "connect", "x", "to", "a", ":", "y", ",", "b", ":", "x",
        ])

    def test_comments_and_repeated_delimiters(self):
        code = "/* header\n spanning lines */ create dfa a;;; add x; /* trailing */"
        self.assertEqual(preprocess(code), "create dfa a;\nadd x;\n")

    def test_line_breaks_and_tabs_are_whitespace(self):
        code = "create dfa\ta,b;\nadd\nx;\n\n"
        self.assertEqual(preprocess(code), "create dfa a , b;\nadd x;\n")

    def test_blank_input(self):
        self.assertEqual(preprocess(""), "")
        self.assertEqual(preprocess(" ;\n; "), "")

    def test_file_names_are_not_tokenized(self):
        self.assertEqual(preprocess("export C:\\out,1->x.txt"), "export C:\\out,1->x.txt;\n")
        self.assertEqual(preprocess("IMPORT  a:b.txt ;add x,y"), "IMPORT a:b.txt;\nadd x , y;\n")
        self.assertEqual(preprocess("export"), "export;\n")

    def test_output_is_a_fixed_point(self):
        for code in (
            "create nfa a,b; add x,y; connect x -> a:y, e:x; accept y; execute ab;",
            "#namedef foo x; #define f; #ifdef f; add foo; #endif; show all",
            "/* c */ connect x to a:y",
        ):
            once = preprocess(code)
            self.assertEqual(preprocess(once), once)


class TestMacros(unittest.TestCase):
    def test_namedef_expands_tokens(self):
        self.assertEqual(preprocess("#namedef foo x; add foo; connect foo to a:foo"),
                         "add x;\nconnect x to a : x;\n")

    def test_namedef_is_case_sensitive_on_tokens(self):
        self.assertEqual(preprocess("#namedef foo x; add FOO"), "add FOO;\n")

    def test_commands_cannot_be_redefined(self):
        for name in ("add", "CONNECT", "create_new"):
            with self.assertRaises(PreprocessorError) as ctx:
                preprocess(f"#namedef {name} x;")
            self.assertIn("Commands cannot be overwritten.", str(ctx.exception))

    def test_wrong_operand_count(self):
        for code in ("#namedef a;", "#namedef a b c;", "#define;", "#ifdef;", "#ifndef a b;", "#endif x;"):
            with self.assertRaises(PreprocessorError) as ctx:
                preprocess(code)
            self.assertIn("Invalid number of arguments", str(ctx.exception))

    def test_errors_are_syntax_errors(self):
        with self.assertRaises(CommandSyntaxError) as ctx:
            preprocess("#define;")
        self.assertTrue(str(ctx.exception).startswith("Syntax Error: "))
        self.assertIn("at command #define", str(ctx.exception))


class TestConditionals(unittest.TestCase):
    def test_ifdef_without_define_suppresses_block(self):
        self.assertEqual(preprocess("#ifdef flag; add x; add y; #endif; add z"), "add z;\n")

    def test_ifdef_with_define_keeps_block(self):
        self.assertEqual(preprocess("#define flag; #ifdef flag; add x; #endif"), "add x;\n")

    def test_ifndef(self):
        self.assertEqual(preprocess("#ifndef flag; add x; #endif"), "add x;\n")
        self.assertEqual(preprocess("#define flag; #ifndef flag; add x; #endif"), "")

    def test_directives_are_case_insensitive(self):
        self.assertEqual(preprocess("#DEFINE flag; #IfDef flag; add x; #ENDIF"), "add x;\n")

    def test_directives_inside_suppressed_block_are_skipped(self):
        code = "#ifdef off; #define on; #namedef a b; #endif; #ifdef on; add a; #endif; add a"
        self.assertEqual(preprocess(code), "add a;\n")

    def test_unterminated_block(self):
        with self.assertRaises(PreprocessorError) as ctx:
            preprocess("#ifdef flag; add x;")
        self.assertIn("#endif", str(ctx.exception))
        with self.assertRaises(PreprocessorError):
            preprocess("#define flag; #ifdef flag; add x;")

    def test_nested_blocks_are_not_tracked(self):
        # the inner #ifdef is skipped while suppressed, the first #endif closes everything
        code = "#define a; #ifdef b; add x; #ifdef a; add y; #endif; add z"
        self.assertEqual(preprocess(code), "add z;\n")
        # a second open block overwrites the first one
        code = "#define a; #ifdef a; #ifdef b; add x; #endif; add y"
        self.assertEqual(preprocess(code), "add y;\n")


class TestDirectiveTable(unittest.TestCase):
    def test_names_and_descriptions(self):
        self.assertEqual(
            sorted(directive_names()), ["#define", "#endif", "#ifdef", "#ifndef", "#namedef"]
        )
        self.assertTrue(describe_directive("#IFDEF").startswith("#ifdef [Symbol];"))
        self.assertIsNone(describe_directive("#pragma"))


if __name__ == "__main__":
    unittest.main()
