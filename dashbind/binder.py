"""
Dashbind binder: bind a parameter schema to the tokens of one invocation.

CommandData is created once per invocation, after the command name has been
matched and the help flag ruled out. Construction only checks that every
required Argument has an assignment token; typing is deferred to lookups.

Lookups never cache: each call re-scans the bound tokens, so repeated lookups
with the same name always return equal results.
"""
from types import MappingProxyType

from .faults import MissingCommandArgumentsError, ParameterNameNotAllowedError
from .parameters import Parameter, Argument, Option


class CommandData:
    """
    Bound, per-invocation view over a schema and its raw tokens.

    Parameters
    - parameters: Iterable[Argument | Option]
      Ordered schema of the command.
    - tokens: Iterable[str]
      Raw tokens following the command name.

    Raises
    - TypeError: a schema entry is not a Parameter, or a token is not a string.
    - ValueError: two arguments (or two options) share a name.
    - MissingCommandArgumentsError: a required argument has no "-<name>=" token.
    """

    def __init__(self, parameters, tokens, /):
        self._arguments = {}
        self._options = {}
        self._tokens = tuple(tokens)

        if not all(isinstance(token, str) for token in self._tokens):
            raise TypeError("command-data tokens must be strings")

        for parameter in parameters:
            if not isinstance(parameter, Parameter):
                raise TypeError("command-data parameters must be arguments or options")
            registry = self._arguments if isinstance(parameter, Argument) else self._options
            if parameter.name in registry:
                raise ValueError(f"duplicated {type(parameter).__typename__} name {parameter.name!r}")
            registry[parameter.name] = parameter

            if isinstance(parameter, Argument):
                prefix = parameter.consolename + "="
                if not any(token.startswith(prefix) for token in self._tokens):
                    raise MissingCommandArgumentsError(
                        "missing required argument %s" % parameter.consolename,
                        title="missing command arguments",
                        hint="pass it as %s=<%s>" % (parameter.consolename, parameter.expected),
                        argument=parameter,
                        name=parameter.name,
                    )

    @property
    def arguments(self):
        return MappingProxyType(self._arguments)

    @property
    def options(self):
        return MappingProxyType(self._options)

    @property
    def tokens(self):
        return self._tokens

    def _lookup(self, registry, name, kind):
        try:
            return registry[name]
        except (KeyError, TypeError):
            raise ParameterNameNotAllowedError(
                "%r is not a declared %s" % (name, kind),
                title="parameter name not allowed",
                hint="declared %ss: %s" % (kind, ", ".join(registry) or "none"),
                name=name,
            ) from None

    def value(self, name, /):
        """Typed value of a required argument; extraction errors propagate."""
        return self._lookup(self._arguments, name, "argument").value(self._tokens)

    def flag(self, name, /):
        """Presence of a flag option; False for value-mode options."""
        return self._lookup(self._options, name, "option").flag(self._tokens)

    def optionalvalue(self, name, /):
        """Value of an option, its default, or None; never an extraction error."""
        return self._lookup(self._options, name, "option").value(self._tokens)

    def __repr__(self):
        return "command-data(arguments=%r, options=%r, tokens=%r)" % (
            tuple(self._arguments), tuple(self._options), self._tokens
        )


__all__ = (
    "CommandData",
)
