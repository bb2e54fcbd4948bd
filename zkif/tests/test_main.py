import os
import sys
import tempfile
from subprocess import SubprocessError

from zkif.tests.zkif_unit_test import ZkifTestCase
from zkif.utils.helpers import read_file
from zkif.utils.run_command import run_command

zkif_cmd = [sys.executable, '-m', 'zkif']


class TestCommandLine(ZkifTestCase):

    def _example(self, d, *args):
        output, _ = run_command(zkif_cmd + ['example', '-o', d] + list(args))
        return output.decode('utf-8').split()

    def test_example_and_validate(self):
        with tempfile.TemporaryDirectory() as d:
            files = self._example(d, '-x', '5')
            self.assertEqual([os.path.basename(f) for f in files], ['constraints_0.zkif', 'witness.zkif', 'header.zkif'])
            output, _ = run_command(zkif_cmd + ['validate'] + files)
            self.assertIn(b'Satisfied: YES', output)

    def test_validate_stdin(self):
        with tempfile.TemporaryDirectory() as d:
            data = b''.join(read_file(f) for f in self._example(d))
            output, _ = run_command(zkif_cmd + ['validate'], stdin=data)
            self.assertIn(b'Satisfied: YES', output)

    def test_stats(self):
        with tempfile.TemporaryDirectory() as d:
            files = self._example(d, '--setup')
            self.assertNotIn('witness.zkif', [os.path.basename(f) for f in files])
            output, _ = run_command(zkif_cmd + ['stats'] + files)
            self.assertIn(b'Constraints: 1 in 1 messages', output)
            self.assertIn(b'Witness: no', output)

    def test_validate_setup_statement(self):
        with tempfile.TemporaryDirectory() as d:
            files = self._example(d, '--setup')
            with self.assertRaises(SubprocessError):
                run_command(zkif_cmd + ['validate'] + files)

    def test_missing_file(self):
        with self.assertRaises(SubprocessError):
            run_command(zkif_cmd + ['validate', 'no_such_file.zkif'])

    def test_invalid_config_value(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(SubprocessError):
                run_command(zkif_cmd + ['example', '-o', d, '--constraints-chunk-size', '0'])
