"""safecmd: run typed commands against a whitelisted object graph, without eval."""

from safecmd.core import SafeCommandInterpreter, UNDEFINED

__version__ = "0.2.0"
