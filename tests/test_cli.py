import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from pycptok.cli import main


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        env = {k: v for k, v in os.environ.items() if not k.startswith("CPTOK_")}
        env_patch = patch.dict(os.environ, env, clear=True)
        env_patch.start()
        self.addCleanup(env_patch.stop)
        # Keep any real user configuration out of the way.
        user_patch = patch("pycptok.core.config.USER_CONFIG_PATH", self.path("user.toml"))
        user_patch.start()
        self.addCleanup(user_patch.stop)

    def path(self, name):
        return Path(self.tmp_dir.name) / name

    def write_file(self, name, content):
        path = self.path(name)
        path.write_text(content, encoding="utf-8")
        return str(path)

    def test_tokens_from_file(self):
        src = self.write_file("in.txt", "1, 2\n  3.5,x")
        result = self.runner.invoke(main, ["tokens", src])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "1\n2\n3.5\nx\n")

    def test_tokens_from_stdin_with_separator(self):
        result = self.runner.invoke(main, ["tokens", "--type", "int", "--separator", " "], input="+1,2\n-3")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "1 2 -3 ")

    def test_tokens_parse_failure_exits(self):
        result = self.runner.invoke(main, ["tokens", "--type", "int", "-"], input="1 x")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("could not parse 'x' as int", result.output)

    def test_tokens_table(self):
        result = self.runner.invoke(main, ["tokens", "--table"], input="alpha beta")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("alpha", result.output)
        self.assertIn("beta", result.output)

    def test_missing_file_exits(self):
        result = self.runner.invoke(main, ["tokens", str(self.path("missing.txt"))])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("cannot open", result.output)

    def test_nums(self):
        result = self.runner.invoke(main, ["nums"], input="a: 12, b: -1 and d = 2")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "12\n-1\n2\n")

    def test_nums_sum_via_alias(self):
        result = self.runner.invoke(main, ["ints", "--sum"], input="a: 12, b: -1 and d = 2")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "13\n")

    def test_lines(self):
        result = self.runner.invoke(main, ["lines"], input="1, a\n2 b c\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("1 | a", result.output)
        self.assertIn("2 | b | c", result.output)

    def test_radix(self):
        src = self.write_file("radix.txt", "255 16\n-10 2\n\n35, 36\n")
        result = self.runner.invoke(main, ["radix", src])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "ff\n-1010\nz\n")

    def test_radix_invalid_base(self):
        result = self.runner.invoke(main, ["radix"], input="10 1\n")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("radix must be between", result.output)

    def test_digest_alias(self):
        result = self.runner.invoke(main, ["md5"], input="pqrstuv1048970")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), "000006136ef2ff3b291c85725f17325c")

    def test_convert(self):
        src = self.write_file("in.txt", "a,b  c\n\td")
        dst = str(self.path("out.txt"))
        result = self.runner.invoke(main, ["convert", src, dst])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.path("out.txt").read_text(encoding="utf-8"), "a\nb\nc\nd\n")

    def test_convert_with_separator(self):
        src = self.write_file("in.txt", "a,b")
        dst = str(self.path("out.txt"))
        result = self.runner.invoke(main, ["convert", "--separator", "\\t", src, dst])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.path("out.txt").read_text(encoding="utf-8"), "a\tb\t")

    def test_convert_same_file_is_rejected(self):
        src = self.write_file("in.txt", "a b")
        result = self.runner.invoke(main, ["convert", src, src])
        self.assertEqual(result.exit_code, 1)
        self.assertEqual(self.path("in.txt").read_text(encoding="utf-8"), "a b")

    def test_config_get_and_set(self):
        result = self.runner.invoke(main, ["config", "get", "read_chunk_size"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("65536", result.output)

        result = self.runner.invoke(main, ["config", "set", "exit_code", "4"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(self.path("user.toml").exists())

        result = self.runner.invoke(main, ["config", "get", "exit_code"])
        self.assertIn("4", result.output)

        result = self.runner.invoke(main, ["config", "reset"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse(self.path("user.toml").exists())

    def test_custom_config_file(self):
        cfg = self.write_file("custom.toml", '[cli]\nseparator = "|"\n')
        result = self.runner.invoke(main, ["--config", cfg, "tokens"], input="a b")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output, "a|b|")


if __name__ == '__main__':
    unittest.main()
