#!/usr/bin/env python3
"""
bracesh Process Tests

Runs real pipelines through the subprocess-backed spawner. Every test
works inside its own temporary directory and sends command output to
files there.

Author: YSNRFD
Version: 1.0.0
"""

import io
import os
import signal
import stat
import sys
import tempfile
import time
import unittest

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from bracesh.core.config_loader import Config, ShellConfig
from bracesh.shell.shell import Shell


def read(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class ProcessTestCase(unittest.TestCase):
    """Shell with the host PATH, running inside a temporary directory."""

    def setUp(self):
        self._cwd = os.getcwd()
        self._tmp = tempfile.TemporaryDirectory()
        os.chdir(self._tmp.name)
        self.stderr = io.StringIO()
        self.shell = self.make_shell()

    def tearDown(self):
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def make_shell(self, stdin=None):
        config = Config(shell=ShellConfig(initial_path=os.environ.get('PATH', '/bin:/usr/bin')))
        shell = Shell(config, stdin=stdin or io.StringIO(), stderr=self.stderr)
        shell.init()
        return shell


class TestPipelines(ProcessTestCase):
    """Test pipes and exit statuses."""

    def test_pipe_into_file(self):
        self.assertEqual(self.shell.evaluate('printf hello | wc -c > count.txt'), 0)
        self.assertEqual(read('count.txt').strip(), '5')

    def test_three_stages(self):
        status = self.shell.evaluate('printf "b\\na\\nb\\n" | sort | uniq > out.txt')

        self.assertEqual(status, 0)
        self.assertEqual(read('out.txt'), 'a\nb\n')

    def test_status_of_last_stage(self):
        self.assertEqual(self.shell.evaluate('true | false'), 1)
        self.assertEqual(self.shell.evaluate('false | true'), 0)
        self.assertEqual(self.shell.evaluate('sh -c "exit 3"'), 3)

    def test_signal_status(self):
        """Test a stage killed by signal N reports 128+N."""
        self.assertEqual(self.shell.evaluate('sh -c "kill -TERM $$"'), 128 + signal.SIGTERM)

    def test_constants_in_arguments(self):
        self.shell.evaluate('WORD = "two words" ; printf $WORD > out.txt')
        self.assertEqual(read('out.txt'), 'two words')

    def test_constants_in_environment(self):
        self.shell.evaluate('GREETING = hi ; env > out.txt')
        self.assertIn('GREETING=hi\n', read('out.txt'))

    def test_short_circuit_skips_redirection(self):
        self.assertEqual(self.shell.evaluate('false && printf x > never.txt'), 1)
        self.assertFalse(os.path.exists('never.txt'))


class TestRedirections(ProcessTestCase):
    """Test <, <<, > and >>."""

    def test_truncate_and_append(self):
        self.shell.evaluate('printf abc > out.txt ; printf def >> out.txt')
        self.assertEqual(read('out.txt'), 'abcdef')

        self.shell.evaluate('printf xyz > out.txt')
        self.assertEqual(read('out.txt'), 'xyz')

    def test_input_file(self):
        with open('in.txt', 'w', encoding='utf-8') as f:
            f.write('line one\n')

        self.assertEqual(self.shell.evaluate('cat < in.txt > out.txt'), 0)
        self.assertEqual(read('out.txt'), 'line one\n')

    def test_missing_input_file(self):
        from bracesh.exceptions import RedirectFileNotFoundError

        self.assertEqual(self.shell.evaluate('cat < missing.txt'), 1)
        self.assertIsInstance(self.shell.evaluator.last_error, RedirectFileNotFoundError)
        self.assertIn('missing.txt', self.stderr.getvalue())

    def test_redirection_beats_pipe(self):
        """Test output redirected to a file is not also sent down the pipe."""
        self.shell.evaluate('printf data > first.txt | wc -c > count.txt')

        self.assertEqual(read('first.txt'), 'data')
        self.assertEqual(read('count.txt').strip(), '0')

    def test_last_redirection_wins(self):
        self.shell.evaluate('printf x > a.txt > b.txt')

        self.assertEqual(read('a.txt'), '')
        self.assertEqual(read('b.txt'), 'x')

    def test_heredoc(self):
        shell = self.make_shell(stdin=io.StringIO("one\ntwo\nEND\nafter\n"))

        self.assertEqual(shell.evaluate('cat << END > out.txt'), 0)
        self.assertEqual(read('out.txt'), 'one\ntwo\n')
        self.assertEqual(shell.input_stream.readline(), 'after\n')

    def test_skipped_heredoc_body_is_not_run(self):
        """Test the body of a short-circuited heredoc is never executed."""
        shell = self.make_shell(stdin=io.StringIO("false && cat << EOF\ntouch marker\nEOF\n"))

        self.assertEqual(shell.run(), 1)
        self.assertFalse(os.path.exists('marker'))
        self.assertNotIn('EOF: command not found', self.stderr.getvalue())

    def test_unresolved_heredoc_body_is_not_run(self):
        shell = self.make_shell(
            stdin=io.StringIO("definitely-not-a-command-xyz << EOF\ntouch marker\nEOF\n")
        )

        self.assertEqual(shell.run(), 127)
        self.assertFalse(os.path.exists('marker'))
        self.assertNotIn('EOF: command not found', self.stderr.getvalue())

    def test_heredoc_without_delimiter(self):
        shell = self.make_shell(stdin=io.StringIO("only\n"))

        self.assertEqual(shell.evaluate('cat << END > out.txt'), 0)
        self.assertEqual(read('out.txt'), 'only\n')


class TestExecution(ProcessTestCase):
    """Test resolution and exec failures."""

    def test_command_not_found(self):
        self.assertEqual(self.shell.evaluate('definitely-not-a-command-xyz'), 127)
        self.assertIn('command not found', self.stderr.getvalue())

    def test_path_comes_from_constants(self):
        """Test PATH is read from the constant table, not the environment."""
        self.shell.evaluate('PATH = /nonexistent')
        self.assertEqual(self.shell.evaluate('true'), 127)

    def test_literal_path(self):
        with open('hello', 'w', encoding='utf-8') as f:
            f.write('#!/bin/sh\nprintf hi > out.txt\n')
        os.chmod('hello', stat.S_IRWXU)

        self.assertEqual(self.shell.evaluate('./hello'), 0)
        self.assertEqual(read('out.txt'), 'hi')

    def test_not_executable_format(self):
        with open('garbage', 'w', encoding='utf-8') as f:
            f.write('this is not a program\n')
        os.chmod('garbage', stat.S_IRWXU)

        self.assertEqual(self.shell.evaluate('./garbage'), 126)


class TestResolver(ProcessTestCase):
    """Test PATH lookup."""

    def test_search_order(self):
        from bracesh.process.resolver import PathResolver
        from bracesh.shell.constants import ConstantTable

        for name in ('first', 'second'):
            os.mkdir(name)
            path = os.path.join(name, 'tool')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('#!/bin/sh\n')
            os.chmod(path, stat.S_IRWXU)
        with open('plain', 'w', encoding='utf-8') as f:
            f.write('')

        table = ConstantTable(initial_path='first:second')
        resolver = PathResolver(table)

        self.assertEqual(resolver.resolve('tool'), os.path.join('first', 'tool'))
        self.assertIsNone(resolver.find('plain'))
        self.assertIsNone(resolver.find('first'))

        table.define('PATH', ':second')
        self.assertEqual(resolver.search_path(), ['.', 'second'])

    def test_not_found(self):
        from bracesh.exceptions import CommandNotFoundError
        from bracesh.process.resolver import PathResolver
        from bracesh.shell.constants import ConstantTable

        with self.assertRaises(CommandNotFoundError):
            PathResolver(ConstantTable(initial_path='')).resolve('ls')


class TestBackground(ProcessTestCase):
    """Test detached pipelines."""

    def test_background_returns_immediately(self):
        start = time.monotonic()
        status = self.shell.evaluate('sleep 3 & ; printf done > out.txt')
        elapsed = time.monotonic() - start

        jobs = self.shell.runner.jobs
        try:
            self.assertEqual(status, 0)
            self.assertLess(elapsed, 1.5)
            self.assertEqual(read('out.txt'), 'done')
            self.assertEqual(len(jobs), 1)
            self.assertEqual(os.getpgid(jobs[0].pgid), jobs[0].pgid)
            self.assertNotEqual(jobs[0].pgid, os.getpgrp())
        finally:
            for job in jobs:
                os.killpg(job.pgid, signal.SIGTERM)
                for process in job.processes:
                    process.wait()

    def test_reap(self):
        self.assertEqual(self.shell.evaluate('true &'), 0)
        job = self.shell.runner.jobs[0]
        for process in job.processes:
            process.wait()

        finished = self.shell.runner.reap()

        self.assertEqual(finished, [job])
        self.assertEqual(self.shell.runner.jobs, [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
