"""
bracesh - A brace-grouping command shell core

Parses a line of shell syntax into statements joined by '&&', '||',
';' and '=' and runs it as operating system processes, with pipes,
redirections and background jobs.
"""

__version__ = "1.0.0"
__author__ = "YSNRFD"

# The shell package must load before the process package.
from .shell.shell import Shell, create_shell
from .shell.constants import ConstantTable
from .shell.evaluator import Evaluator
from .process.runner import ProcessRunner

__all__ = [
    'Shell',
    'create_shell',
    'ConstantTable',
    'Evaluator',
    'ProcessRunner',
]
