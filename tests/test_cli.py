"""
Tests for the Bina command-line runner and REPL.
"""
import sys
import os
import io
import logging
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bina.cli import run_file, main, configure_logging
from bina.repl import Repl, run_repl
from bina.values import Number


class TestRunFile(unittest.TestCase):
    """run_file maps each pipeline stage's failure to a message and exit code."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, source: str) -> str:
        path = os.path.join(self.tmpdir.name, "prog.bina")
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)
        return path

    def _run(self, source: str):
        path = self._write(source)
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = run_file(path)
        return code, out.getvalue(), err.getvalue()

    def test_success(self):
        code, out, err = self._run("let x := 10 + 5; print x;")
        self.assertEqual(code, 0)
        self.assertEqual(out, "15\n")
        self.assertEqual(err, "")

    def test_coercion_prints_sum(self):
        code, out, _ = self._run('print "5" + 3;')
        self.assertEqual(code, 0)
        self.assertEqual(out, "8\n")

    def test_lex_error(self):
        code, out, err = self._run("let x := 1 - 2;")
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertTrue(err.startswith("Syntax error:"))

    def test_parse_error(self):
        code, _, err = self._run("let x := 1 + 2 + 3;")
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Parse error:"))

    def test_runtime_error_after_output(self):
        code, out, err = self._run('print 1; print "abc" + 3;')
        self.assertEqual(code, 1)
        self.assertEqual(out, "1\n")
        self.assertTrue(err.startswith("Runtime error:"))
        self.assertIn("abc", err)

    def test_missing_file(self):
        err = io.StringIO()
        with redirect_stderr(err):
            code = run_file(os.path.join(self.tmpdir.name, "nope.bina"))
        self.assertEqual(code, 1)
        self.assertIn("file not found", err.getvalue())

    def test_directory_is_read_error(self):
        err = io.StringIO()
        with redirect_stderr(err):
            code = run_file(self.tmpdir.name)
        self.assertEqual(code, 1)
        self.assertIn("cannot read", err.getvalue())

    def test_invalid_utf8_is_read_error(self):
        path = os.path.join(self.tmpdir.name, "bad.bina")
        with open(path, "wb") as f:
            f.write(b'print "\xff";')
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = run_file(path)
        self.assertEqual(code, 1)
        self.assertEqual(out.getvalue(), "")
        self.assertIn("cannot read", err.getvalue())


class TestMain(unittest.TestCase):

    def test_missing_argument_is_usage_error(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 2)

    def test_exit_code_from_run_file(self):
        with mock.patch("bina.cli.run_file", return_value=1) as run, \
                mock.patch("bina.cli.configure_logging") as configure:
            with self.assertRaises(SystemExit) as ctx:
                main(["-vv", "prog.bina"])
        self.assertEqual(ctx.exception.code, 1)
        run.assert_called_once_with("prog.bina")
        configure.assert_called_once_with(2)

    def test_configure_logging_levels(self):
        with mock.patch("bina.cli.logging.basicConfig") as basic:
            configure_logging(0)
            configure_logging(1)
            configure_logging(3)
        levels = [call.kwargs["level"] for call in basic.call_args_list]
        self.assertEqual(levels, [logging.WARNING, logging.INFO, logging.DEBUG])


class TestRepl(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.repl = Repl(output_fn=self.output.append)

    def test_environment_persists_between_lines(self):
        self.repl.handle("let a := 2;")
        self.repl.handle("let b := a * 21;")
        self.repl.handle("print b;")
        self.assertEqual(self.output, ["42"])
        self.assertEqual(self.repl.env, {"a": Number(2), "b": Number(42)})

    def test_errors_do_not_end_session(self):
        self.assertTrue(self.repl.handle("print missing;"))
        self.assertTrue(self.repl.handle("print 1 +;"))
        self.assertTrue(self.repl.handle("print @;"))
        self.assertIn("Runtime error", self.output[0])
        self.assertIn("Parse error", self.output[1])
        self.assertIn("Syntax error", self.output[2])

    def test_failed_line_keeps_previous_env(self):
        self.repl.handle("let a := 1;")
        self.repl.handle("a := 2; print missing;")
        self.assertEqual(self.repl.env, {"a": Number(1)})

    def test_env_and_clear(self):
        self.repl.handle("env")
        self.repl.handle('let s := "hi";')
        self.repl.handle("env")
        self.repl.handle("clear")
        self.assertEqual(self.output[0], "  (no bindings)")
        self.assertEqual(self.output[1], "  s = hi")
        self.assertEqual(self.repl.env, {})

    def test_exit(self):
        self.assertFalse(self.repl.handle("exit"))
        self.assertFalse(self.repl.handle("QUIT"))

    def test_block_spans_several_lines(self):
        self.repl.handle("let i := 0;")
        self.assertTrue(self.repl.handle("while i < 2 {"))
        self.assertEqual(self.repl.prompt, "  ... ")
        self.repl.handle("print i; i := i + 1;")
        self.assertEqual(self.output, [])
        self.repl.handle("}")
        self.assertEqual(self.output, ["0", "1"])
        self.assertEqual(self.repl.env, {"i": Number(2)})
        self.assertEqual(self.repl.prompt, "bina> ")

    def test_brace_inside_string_does_not_open_block(self):
        self.repl.handle('print "{";')
        self.assertEqual(self.output, ["{"])
        self.assertEqual(self.repl.pending, [])

    def test_empty_line_discards_unfinished_block(self):
        self.repl.handle("if true {")
        self.repl.handle("   ")
        self.assertEqual(self.repl.pending, [])
        self.assertIn("discarded", self.output[0])
        self.repl.handle("print 7;")
        self.assertEqual(self.output[1], "7")

    def test_run_repl_collects_block_lines(self):
        lines = iter(["if true {", 'print "inside";', "}"])
        prompts = []

        def fake_input(prompt):
            prompts.append(prompt)
            try:
                return next(lines)
            except StopIteration:
                raise EOFError

        out = io.StringIO()
        with redirect_stdout(out):
            run_repl(input_fn=fake_input)
        self.assertIn("inside\n", out.getvalue())
        self.assertEqual(prompts, ["bina> ", "  ... ", "  ... ", "bina> "])

    def test_run_repl_stops_on_eof(self):
        lines = iter(["let x := 3;", "print x;"])

        def fake_input(prompt):
            try:
                return next(lines)
            except StopIteration:
                raise EOFError

        out = io.StringIO()
        with redirect_stdout(out):
            run_repl(input_fn=fake_input)
        self.assertIn("3\n", out.getvalue())


if __name__ == "__main__":
    unittest.main(verbosity=2)
