import io
import os
import sys
import tempfile
import unittest

from unittest import mock

from docopt import DocoptExit

from mgrep.cli import ColorWhen, Config, main, parse_args, resolve_use_color, run

class TestParseArgs(unittest.TestCase):
    def test_minimal(self):
        config = parse_args(['-E', 'a+b', 'x.txt'])
        self.assertEqual(config.pattern, 'a+b')
        self.assertFalse(config.anchored)
        self.assertFalse(config.only_matching)
        self.assertFalse(config.recursive)
        self.assertIs(config.color, ColorWhen.NEVER)
        self.assertEqual(config.paths, ['x.txt'])

    def test_all_options(self):
        config = parse_args(
            ['-o', '-r', '--color=always', '--debug', '-E', '^ab', 'd1', 'd2'])
        self.assertEqual(config.pattern, '^ab')
        self.assertTrue(config.anchored)
        self.assertTrue(config.only_matching)
        self.assertTrue(config.recursive)
        self.assertTrue(config.debug)
        self.assertIs(config.color, ColorWhen.ALWAYS)
        self.assertEqual(config.paths, ['d1', 'd2'])

    def test_stdin(self):
        config = parse_args(['-E', r'\d'])
        self.assertEqual(config.paths, [])

    def test_unknown_color(self):
        with self.assertLogs('mgrep.cli', level='WARNING'):
            config = parse_args(['--color=rainbow', '-E', 'a'])
        self.assertIs(config.color, ColorWhen.NEVER)

    def test_missing_pattern(self):
        with self.assertRaises(DocoptExit):
            parse_args([])
        with self.assertRaises(DocoptExit):
            parse_args(['x.txt'])

class TestResolveUseColor(unittest.TestCase):
    def test(self):
        stream = io.StringIO()
        self.assertTrue(resolve_use_color(ColorWhen.ALWAYS, stream))
        self.assertFalse(resolve_use_color(ColorWhen.NEVER, stream))
        self.assertFalse(resolve_use_color(ColorWhen.AUTO, stream))

        tty = mock.Mock()
        tty.isatty.return_value = True
        self.assertTrue(resolve_use_color(ColorWhen.AUTO, tty))

class TestRun(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.a = self.write('a.txt', 'apple\nbanana\n')
        self.b = self.write(os.path.join('sub', 'b.txt'), 'candy and nuts\n')
        self.c = self.write('c.txt', 'cherry\n')

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name, content, mode='w'):
        path = os.path.join(self.tmp, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if mode == 'wb':
            with open(path, mode) as f:
                f.write(content)
        else:
            with open(path, mode, encoding='utf-8', newline='') as f:
                f.write(content)
        return path

    def run_config(self, config, stdin=''):
        # Just a helper
        out = io.StringIO()
        status = run(config, stdin=io.StringIO(stdin), stdout=out)
        return status, out.getvalue()

    def test_stdin(self):
        self.assertEqual(self.run_config(Config('an'), 'banana\napple\n'),
                         (0, 'banana\n'))
        self.assertEqual(self.run_config(Config('kiwi'), 'banana\n'), (1, ''))

    def test_stdin_only_matching(self):
        config = Config(r'\d+', only_matching=True)
        self.assertEqual(self.run_config(config, 'a1b22\nnone\n333\n'),
                         (0, '1\n22\n333\n'))

    def test_single_file_has_no_prefix(self):
        config = Config('an', paths=[self.a])
        self.assertEqual(self.run_config(config), (0, 'banana\n'))

    def test_several_files_have_prefix(self):
        config = Config('an', paths=[self.a, self.c])
        self.assertEqual(self.run_config(config), (0, f'{self.a}:banana\n'))

    def test_recursive(self):
        config = Config('an', recursive=True, paths=[self.tmp])
        expected = f'{self.a}:banana\n{self.b}:candy and nuts\n'
        self.assertEqual(self.run_config(config), (0, expected))

    def test_directory_without_recursion_is_skipped(self):
        config = Config('an', paths=[self.tmp])
        self.assertEqual(self.run_config(config), (1, ''))

    def test_missing_and_undecodable_files_are_skipped(self):
        bad = self.write('bad.txt', b'an\xff\xfe\n', mode='wb')
        missing = os.path.join(self.tmp, 'missing.txt')
        config = Config('an', paths=[missing, bad, self.a])
        with self.assertLogs('mgrep', level='DEBUG'):
            result = self.run_config(config)
        self.assertEqual(result, (0, f'{self.a}:banana\n'))

    def test_recursive_keeps_path_as_given(self):
        cwd = os.getcwd()
        os.chdir(self.tmp)
        self.addCleanup(os.chdir, cwd)
        config = Config('an', recursive=True, paths=['.'])
        expected = ('./a.txt:banana\n'
                    f'{os.path.join(".", "sub", "b.txt")}:candy and nuts\n')
        self.assertEqual(self.run_config(config), (0, expected))

    def test_anchored(self):
        config = Config('^c', only_matching=True, paths=[self.b, self.c])
        expected = f'{self.b}:c\n{self.c}:c\n'
        self.assertEqual(self.run_config(config), (0, expected))

    def test_color(self):
        config = Config('an', color=ColorWhen.ALWAYS, only_matching=True)
        status, out = self.run_config(config, 'an\n')
        self.assertEqual(out, '\x1b[01;31man\x1b[m\n')

class TestMain(unittest.TestCase):
    def test_exit_status(self):
        with mock.patch('sys.stdin', io.StringIO('hello\nworld\n')), \
             mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            with self.assertRaises(SystemExit) as cm:
                main(['mgrep', '-E', 'wor'])
        self.assertEqual(cm.exception.code, 0)
        self.assertEqual(out.getvalue(), 'world\n')

        with mock.patch('sys.stdin', io.StringIO('hello\n')), \
             mock.patch('sys.stdout', new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as cm:
                main(['mgrep', '-E', 'wor'])
        self.assertEqual(cm.exception.code, 1)

    def test_long_line(self):
        self.addCleanup(sys.setrecursionlimit, sys.getrecursionlimit())
        line = 'a' + 'x' * 3000 + 'b'
        with mock.patch('sys.stdin', io.StringIO(line + '\n')), \
             mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            with self.assertRaises(SystemExit) as cm:
                main(['mgrep', '-E', 'a.*b'])
        self.assertEqual(cm.exception.code, 0)
        self.assertEqual(out.getvalue(), line + '\n')

    def test_logging_is_configured_before_options_are_read(self):
        calls = mock.Mock()
        calls.color_when.return_value = ColorWhen.NEVER
        with mock.patch('mgrep.cli.logging.basicConfig', calls.basicConfig), \
             mock.patch('mgrep.cli._color_when', calls.color_when), \
             mock.patch('sys.stdin', io.StringIO('')), \
             mock.patch('sys.stdout', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main(['mgrep', '--color=rainbow', '-E', 'a'])
        self.assertEqual([name for name, args, kwargs in calls.mock_calls],
                         ['basicConfig', 'color_when'])

if __name__ == '__main__':
    unittest.main()
