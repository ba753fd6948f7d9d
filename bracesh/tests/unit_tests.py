#!/usr/bin/env python3
"""
bracesh Unit Tests

Tests for the pure parts of the shell core: scanner, parsers,
expansion, constant table, exceptions, logging and configuration.

Run with: python -m pytest bracesh/tests -v
Or: python bracesh/tests/unit_tests.py

Author: YSNRFD
Version: 1.0.0
"""

import json
import os
import sys
import tempfile
import unittest

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_parse_exception(self):
        """Test parse errors carry construct, column and a caret."""
        from bracesh.exceptions import UnbalancedBraceError, ParseException

        exc = UnbalancedBraceError("{echo a", 0)

        self.assertIsInstance(exc, ParseException)
        self.assertEqual(exc.error_code, 1001)
        self.assertEqual(exc.construct, "brace")
        self.assertFalse(exc.recoverable)
        self.assertIn("1001", str(exc))
        self.assertEqual(exc.describe().splitlines()[-1], "  ^")

    def test_execution_exceptions(self):
        """Test recoverable errors map to exit statuses."""
        from bracesh.exceptions import (
            CommandNotFoundError, InvalidIdentifierError, RedirectFileNotFoundError,
        )

        exc = CommandNotFoundError("frob")
        self.assertEqual(exc.status, 127)
        self.assertTrue(exc.recoverable)
        self.assertEqual(exc.message, "frob: command not found")

        self.assertEqual(InvalidIdentifierError("1x").status, 1)
        self.assertEqual(RedirectFileNotFoundError("in.txt").path, "in.txt")

    def test_fatal_exceptions(self):
        """Test fatal errors are not recoverable."""
        from bracesh.exceptions import PipeCreationError, ProcessCreationError, FatalShellError

        exc = ProcessCreationError("ls", "out of memory", errno=12)
        self.assertIsInstance(exc, FatalShellError)
        self.assertFalse(exc.recoverable)
        self.assertEqual(exc.context["errno"], 12)
        self.assertEqual(PipeCreationError("too many files").error_code, 3002)


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def tearDown(self):
        from bracesh.logger import Logger
        Logger.reset()

    def test_logger_singleton(self):
        """Test one logger per subsystem."""
        from bracesh.logger import Logger, get_logger

        self.assertIs(Logger('test1'), get_logger('test1'))
        self.assertIsNot(Logger('test1'), Logger('test2'))

    def test_buffered_logs(self):
        """Test records reach the in-memory buffer after initialize()."""
        from bracesh.logger import Logger, LogLevel, get_logger

        Logger.initialize(level=LogLevel.DEBUG)
        get_logger('unit').debug("hello", context={'k': 'v'})

        logs = Logger.get_buffered_logs(subsystem='unit')
        self.assertEqual(logs[-1]['message'], "hello")
        self.assertEqual(logs[-1]['context'], {'k': 'v'})

    def test_parse_level(self):
        """Test level names map to LogLevel."""
        from bracesh.logger import LogLevel, parse_level

        self.assertEqual(parse_level('debug'), LogLevel.DEBUG)
        self.assertEqual(parse_level('bogus'), LogLevel.WARNING)


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def tearDown(self):
        from bracesh.core.config_loader import ConfigLoader
        ConfigLoader().reset()

    def test_default_config(self):
        """Test default configuration values."""
        from bracesh.core.config_loader import Config

        config = Config()

        self.assertEqual(config.shell.initial_path, "/bin:/usr/bin")
        self.assertEqual(config.process.command_not_found_status, 127)
        self.assertEqual(config.logging.level, "WARNING")

    def test_load_json(self):
        """Test loading overrides from a JSON file."""
        from bracesh.core.config_loader import ConfigLoader

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'bracesh.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'shell': {'initial_path': '/opt/bin'}}, f)

            config = ConfigLoader().load(path)

        self.assertEqual(config.shell.initial_path, "/opt/bin")
        self.assertEqual(config.shell.prompt, "$ ")

    def test_load_errors(self):
        """Test missing files and bad JSON raise ConfigError."""
        from bracesh.core.config_loader import ConfigLoader
        from bracesh.exceptions import ConfigError

        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                ConfigLoader().load(os.path.join(tmp, 'missing.json'))

            path = os.path.join(tmp, 'bad.json')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{not json')
            with self.assertRaises(ConfigError):
                ConfigLoader().load(path)

    def test_dot_notation(self):
        """Test get/set with dot-notation keys."""
        from bracesh.core.config_loader import ConfigLoader
        from bracesh.exceptions import ConfigError

        loader = ConfigLoader()
        loader.set('shell.prompt', '% ')

        self.assertEqual(loader.get('shell.prompt'), '% ')
        self.assertIsNone(loader.get('shell.nothing'))
        self.assertEqual(loader.to_dict()['shell']['prompt'], '% ')
        with self.assertRaises(ConfigError):
            loader.set('nothing.here', 1)


class TestConstantTable(unittest.TestCase):
    """Test the constant table."""

    def test_seeded_path(self):
        from bracesh.shell.constants import ConstantTable

        table = ConstantTable(initial_path='/bin')

        self.assertEqual(table.lookup('PATH'), '/bin')
        self.assertIn('PATH', table)
        self.assertEqual(len(table), 1)

    def test_missing_lookup(self):
        """Test a missing name is an explicit None, never an error."""
        from bracesh.shell.constants import ConstantTable

        self.assertIsNone(ConstantTable().lookup('NOPE'))

    def test_define(self):
        from bracesh.shell.constants import ConstantTable

        table = ConstantTable()
        table.define('A1', 'x')
        table.define('A1', 'y')

        self.assertEqual(table.lookup('A1'), 'y')
        self.assertEqual(table.names(), ['A1'])
        for bad in ('', '1A', 'A_B', 'A-B', 'é2', 'A²'):
            with self.assertRaises(ValueError):
                table.define(bad, 'v')

    def test_snapshot_is_a_copy(self):
        from bracesh.shell.constants import ConstantTable

        table = ConstantTable()
        table.define('A', '1')
        snapshot = table.snapshot()
        table.define('A', '2')

        self.assertEqual(snapshot, {'A': '1'})


class TestScanner(unittest.TestCase):
    """Test the scanning primitives."""

    def test_trim(self):
        from bracesh.shell.scanner import trim

        self.assertEqual(trim("  ab  "), (2, 4))
        self.assertEqual(trim("xx  ab  xx", 2, 8), (4, 6))
        self.assertIsNone(trim("   "))
        self.assertIsNone(trim(""))

    def test_match_brace(self):
        """Test nested braces are matched by depth."""
        from bracesh.shell.scanner import match_brace

        text = "{a {b} {c {d}}} e"
        self.assertEqual(match_brace(text, 0), 14)
        self.assertEqual(match_brace(text, 3), 5)

    def test_match_brace_ignores_quoted_braces(self):
        from bracesh.shell.scanner import match_brace

        self.assertEqual(match_brace('{echo "}"}', 0), 9)

    def test_unbalanced_brace(self):
        from bracesh.shell.scanner import match_brace
        from bracesh.exceptions import UnbalancedBraceError

        with self.assertRaises(UnbalancedBraceError) as ctx:
            match_brace("{echo {a}", 0)
        self.assertEqual(ctx.exception.column, 0)

    def test_match_quote(self):
        from bracesh.shell.scanner import match_quote
        from bracesh.exceptions import UnterminatedQuoteError

        self.assertEqual(match_quote('"a b" c', 0), 4)
        self.assertEqual(match_quote('"a \\" b"', 0), 7)
        with self.assertRaises(UnterminatedQuoteError):
            match_quote('echo "abc', 5)

    def test_tokenize(self):
        """Test braced and quoted regions stay in one token."""
        from bracesh.shell.scanner import tokenize

        tokens = tokenize('{echo a ; b} && echo "x  y"')

        self.assertEqual([t.value for t in tokens], ['{echo a ; b}', '&&', 'echo', '"x  y"'])
        self.assertEqual((tokens[1].start, tokens[1].end), (13, 15))

    def test_stray_closing_brace(self):
        from bracesh.shell.scanner import tokenize
        from bracesh.exceptions import UnbalancedBraceError

        with self.assertRaises(UnbalancedBraceError) as ctx:
            tokenize("echo a }")
        self.assertEqual(ctx.exception.column, 7)

    def test_operator_classes(self):
        """Test a pipe is never an expression operator."""
        from bracesh.shell.scanner import is_operator, is_pipe, is_redirect

        for op in ('&&', '||', ';', '='):
            self.assertTrue(is_operator(op))
        self.assertFalse(is_operator('|'))
        self.assertTrue(is_pipe('|'))
        self.assertTrue(is_redirect('<<'))
        self.assertFalse(is_redirect('&&'))


class TestExpansion(unittest.TestCase):
    """Test quote removal and $NAME expansion."""

    def setUp(self):
        from bracesh.shell.constants import ConstantTable

        self.table = ConstantTable()
        self.table.define('A', '1')
        self.table.define('X', '$A')

    def test_no_dollar_unchanged(self):
        from bracesh.shell.expansion import expand

        self.assertEqual(expand('plain-text', self.table), 'plain-text')

    def test_substitution(self):
        from bracesh.shell.expansion import expand

        self.assertEqual(expand('$A', self.table), '1')
        self.assertEqual(expand('x$A-y$A', self.table), 'x1-y1')
        self.assertEqual(expand('$UNDEFINED', self.table), '')

    def test_maximal_name(self):
        """Test the whole alphanumeric run is the name."""
        from bracesh.shell.expansion import expand

        self.assertEqual(expand('$A2', self.table), '')
        self.assertEqual(expand('$A²', self.table), '1²')

    def test_not_recursive(self):
        from bracesh.shell.expansion import expand

        self.assertEqual(expand('$X', self.table), '$A')

    def test_lone_dollar(self):
        from bracesh.shell.expansion import expand

        self.assertEqual(expand('$', self.table), '$')
        self.assertEqual(expand('cost: $-5', self.table), 'cost: $-5')

    def test_unquote(self):
        from bracesh.shell.expansion import unquote

        self.assertEqual(unquote('"a b"'), 'a b')
        self.assertEqual(unquote('a"b c"d'), 'ab cd')
        self.assertEqual(unquote('"say \\"hi\\""'), 'say "hi"')
        self.assertEqual(unquote('back\\slash'), 'back\\slash')

    def test_quoted_words_are_expanded(self):
        from bracesh.shell.expansion import expand_word

        self.assertEqual(expand_word('"$A b"', self.table), '1 b')


class TestExpressionParser(unittest.TestCase):
    """Test splitting expressions at their leftmost operator."""

    def test_leftmost_split(self):
        from bracesh.shell.parser import split_expression

        self.assertEqual(tuple(split_expression('a ; b && c')), ('a', ';', 'b && c'))
        self.assertEqual(tuple(split_expression('a && b ; c')), ('a', '&&', 'b ; c'))

    def test_braced_left_statement(self):
        """Test operators inside braces are not split points."""
        from bracesh.shell.parser import split_expression

        self.assertEqual(
            tuple(split_expression('{a && b} ; c')),
            ('{a && b}', ';', 'c')
        )

    def test_no_operator(self):
        from bracesh.shell.parser import split_expression

        self.assertEqual(tuple(split_expression('  ls -l  ')), ('ls -l', None, ''))
        self.assertEqual(tuple(split_expression('a | b')), ('a | b', None, ''))
        self.assertEqual(tuple(split_expression('echo "a && b"')), ('echo "a && b"', None, ''))
        self.assertEqual(tuple(split_expression('   ')), ('', None, ''))

    def test_operand_errors(self):
        from bracesh.shell.parser import split_expression
        from bracesh.exceptions import EmptyLeftOperandError, MissingRightOperandError

        with self.assertRaises(EmptyLeftOperandError):
            split_expression('&& ls')
        with self.assertRaises(MissingRightOperandError) as ctx:
            split_expression('ls ||')
        self.assertEqual(ctx.exception.operator, '||')


class TestParse(unittest.TestCase):
    """Test building syntax trees."""

    def test_right_leaning_chain(self):
        from bracesh.shell.parser import parse, Compound
        from bracesh.shell.invocation import Pipeline

        tree = parse('a ; b && c')

        self.assertIsInstance(tree, Compound)
        self.assertEqual(tree.operator, ';')
        self.assertIsInstance(tree.left, Pipeline)
        self.assertEqual(tree.right.operator, '&&')
        self.assertEqual(tree.right.right.commands[0].words, ('c',))

    def test_blank_line(self):
        from bracesh.shell.parser import parse

        self.assertIsNone(parse(''))
        self.assertIsNone(parse('   \t'))

    def test_braced_statement(self):
        from bracesh.shell.parser import parse, Braced, Compound

        tree = parse('{ {echo a} ; {echo b} }')

        self.assertIsInstance(tree, Braced)
        self.assertIsInstance(tree.body, Compound)
        self.assertIsInstance(tree.body.left, Braced)
        self.assertIsNone(parse('{ }').body)

    def test_text_after_brace(self):
        from bracesh.shell.parser import parse
        from bracesh.exceptions import UnbalancedBraceError

        with self.assertRaises(UnbalancedBraceError):
            parse('{echo a}x')
        with self.assertRaises(UnbalancedBraceError):
            parse('{echo a')

    def test_assignment_binds_one_statement(self):
        from bracesh.shell.parser import parse, Assignment, Compound

        tree = parse('A = x ; echo $A')

        self.assertIsInstance(tree, Compound)
        self.assertEqual(tree.left, Assignment('A', 'x'))
        self.assertEqual(tree.right.commands[0].words, ('echo', '$A'))
        self.assertEqual(parse('A = hello  world'), Assignment('A', 'hello  world'))
        self.assertEqual(parse('A = x = y'), Assignment('A', 'x = y'))

    def test_compact_assignment(self):
        from bracesh.shell.parser import parse, Assignment
        from bracesh.shell.invocation import Pipeline

        self.assertEqual(parse('A=b'), Assignment('A', 'b'))
        self.assertEqual(parse('A="b c"'), Assignment('A', '"b c"'))
        self.assertEqual(parse('A='), Assignment('A', ''))
        self.assertIsInstance(parse('A=b ls'), Pipeline)

    def test_assignment_errors(self):
        from bracesh.shell.parser import parse
        from bracesh.exceptions import MissingRightOperandError

        with self.assertRaises(MissingRightOperandError):
            parse('A = ; ls')
        with self.assertRaises(MissingRightOperandError):
            parse('A = x ;')

    def test_statement_with_operator_is_an_expression(self):
        from bracesh.shell.parser import parse_statement, Compound

        self.assertIsInstance(parse_statement('a && b'), Compound)


class TestInvocationParser(unittest.TestCase):
    """Test pipeline parsing."""

    def test_pipeline_segments(self):
        from bracesh.shell.invocation import parse_invocation

        pipeline = parse_invocation('ls -l | grep x | wc -l')

        self.assertEqual(
            [c.words for c in pipeline.commands],
            [('ls', '-l'), ('grep', 'x'), ('wc', '-l')]
        )
        self.assertFalse(pipeline.background)

    def test_dangling_pipe(self):
        from bracesh.shell.invocation import parse_invocation
        from bracesh.exceptions import DanglingPipeError

        for text in ('| ls', 'ls |', 'ls | | wc'):
            with self.assertRaises(DanglingPipeError):
                parse_invocation(text)

    def test_background(self):
        from bracesh.shell.invocation import parse_invocation
        from bracesh.exceptions import BackgroundMidPipelineError, EmptyCommandError

        self.assertTrue(parse_invocation('sleep 5 &').background)
        self.assertEqual(parse_invocation('a | b &').commands[1].words, ('b',))
        with self.assertRaises(BackgroundMidPipelineError):
            parse_invocation('a & | b')
        with self.assertRaises(BackgroundMidPipelineError) as ctx:
            parse_invocation('sleep 1 & echo b')
        self.assertEqual(ctx.exception.message, "'&' must end the statement")
        with self.assertRaises(EmptyCommandError):
            parse_invocation('a | &')

    def test_redirections(self):
        """Test redirection targets are not arguments."""
        from bracesh.shell.invocation import parse_invocation, RedirectKind, RedirectionClause

        pipeline = parse_invocation('sort < in.txt -r >> out.txt')
        command = pipeline.commands[0]

        self.assertEqual(command.words, ('sort', '-r'))
        self.assertEqual(command.redirections, (
            RedirectionClause(RedirectKind.INPUT, 'in.txt'),
            RedirectionClause(RedirectKind.APPEND, 'out.txt'),
        ))

    def test_redirection_errors(self):
        from bracesh.shell.invocation import parse_invocation
        from bracesh.exceptions import MissingRedirectTargetError, EmptyCommandError

        with self.assertRaises(MissingRedirectTargetError):
            parse_invocation('cat <')
        with self.assertRaises(MissingRedirectTargetError):
            parse_invocation('cat > > f')
        with self.assertRaises(EmptyCommandError):
            parse_invocation('> out.txt')

    def test_quoted_arguments(self):
        from bracesh.shell.invocation import parse_invocation
        from bracesh.shell.constants import ConstantTable
        from bracesh.exceptions import UnterminatedQuoteError

        table = ConstantTable()
        table.define('X', '1')
        pipeline = parse_invocation('echo "a  b" $X "$X | y" << "EOF$X"')
        expanded = pipeline.expand(table)[0]

        self.assertEqual(expanded.argv, ['echo', 'a  b', '1', '1 | y'])
        self.assertEqual(expanded.redirections[0].target, 'EOF$X')
        with self.assertRaises(UnterminatedQuoteError):
            parse_invocation('echo "abc')


if __name__ == '__main__':
    unittest.main(verbosity=2)
