import sys
from subprocess import SubprocessError

from zkif.tests.zkif_unit_test import ZkifTestCase
from zkif.utils.run_command import run_command, get_command


class TestRunCommand(ZkifTestCase):

    def test_echo(self):
        output, error = run_command(['echo', 'abc'])
        self.assertEqual(output, b"abc\n")
        self.assertEqual(error, "")

    def test_error(self):
        with self.assertRaises(SubprocessError):
            run_command(['ls', '-error'])

    def test_stdin(self):
        output, _ = run_command([sys.executable, '-c', 'import sys; sys.stdout.write(sys.stdin.read()[::-1])'], stdin=b'abc')
        self.assertEqual(output, b'cba')

    def test_get_command(self):
        self.assertEqual(get_command(['echo', 'a b']), 'echo "a b"')
