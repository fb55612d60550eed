"""
Dashbind command layer: declare, dispatch, and document commands.

What this module provides
- Command: a named command with an ordered parameter schema and a callback that
  receives the bound CommandData.
  • parse(arguments): check the name, intercept --help, bind, and run.
  • help(): rich-based help listing arguments then options.
- command(...): decorator building a Command around a callback.
- HelpCommand: the built-in "help" command listing the token syntax and every command.
- Console: tries each command in turn over the process arguments.
- invoke(target, prompt): convenience runner for a Command or a list of commands.

Token syntax (exact)
- arguments: -<name>=<value>
- options:   --<name>=<value>
- flags:     --<name>
- arrays:    -<name>=1,2,3  (',' separated, no escaping)

Quick start
    from dashbind import command, invoke, Argument, Option, ValueType, Value

    @command(
        "sum",
        Argument("nums", ValueType.array(ValueType.INT), descr="numbers to add"),
        Option("scale", ValueType.INT, Value.int(1)),
        Option("verbose"),
    )
    def total(data):
        numbers = [value.intvalue() for value in data.value("nums").arrayvalue()]
        print(sum(numbers) * data.optionalvalue("scale").intvalue())

    if __name__ == "__main__":
        invoke(total, "-nums=1,2,3 --scale=10")

Fault flow
- IncorrectCommandNameError is always raised: dispatchers catch it and try the
  next command.
- Every other fault goes through Command.trigger: raised by default; rendered
  (with help) and turned into exit status 1 when shell=True.
"""
import copy
import difflib
import inspect
import re
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console as RichConsole, Group
from rich.panel import Panel
from rich.text import Text

from .binder import CommandData
from .faults import *
from .parameters import Parameter, Argument, Option
from .utils import *

# Intercepted before binding, whatever the command schema declares.
_HELP = Option("help", descr="show this help message")


def _sanitize_name(cls, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__name__.lower()} 'name' must be a string")
    elif not re.fullmatch(r"[^\s=]+", name) or name.startswith("-"):
        raise ValueError(f"{cls.__name__.lower()} 'name' must be a single word not starting with '-'")
    return name


def _sanitize_parameters(cls, parameters, /):
    sanitized = []
    seen = set()
    for parameter in parameters:
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{cls.__name__.lower()} parameters must be arguments or options")
        if (key := parameter.consolename) in seen:
            raise ValueError(f"{cls.__name__.lower()} parameters cannot contain duplicates ({key})")
        if key == _HELP.consolename:
            raise ValueError(f"{cls.__name__.lower()} cannot redeclare the reserved {key} flag")
        seen.add(key)
        sanitized.append(parameter)
    return tuple(sanitized)


def _sanitize_lines(cls, lines, /):
    if isinstance(lines, str | Text):
        lines = (lines,)
    if not isinstance(lines, Iterable):
        raise TypeError(f"{cls.__name__.lower()} 'help' must be an iterable of strings")
    sanitized = []
    for line in lines:
        if not isinstance(line, str | Text):
            raise TypeError(f"{cls.__name__.lower()} 'help' lines must be strings")
        sanitized.append(line)
    return tuple(sanitized)


class Command:
    """
    Named command bound to an ordered schema of Arguments and Options.

    Properties (read-only)
    - name, parameters, lines, descr, shell, colorful, fancy
    - arguments / options: the schema split by kind, in declaration order

    Runtime flags
    - shell: render faults and exit instead of raising them.
    - colorful: style help and faults with the palette (see __styles__ in __main__).
    - fancy: wrap help and faults in rich panels.
    """

    name = mirror("name")
    parameters = mirror("parameters")
    lines = mirror("lines")
    descr = mirror("descr")
    shell = mirror("shell")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __init__(
            self,
            name,
            parameters=(),
            /,
            callback=Unset,
            help=(),
            descr=Unset,
            *,
            shell=False,
            colorful=False,
            fancy=False
    ):
        if not callable(callback) and callback is not Unset:
            raise TypeError(f"{type(self).__name__.lower()} 'callback' must be callable")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{type(self).__name__.lower()} 'descr' must be a string")

        self._name = _sanitize_name(type(self), name)
        self._parameters = _sanitize_parameters(type(self), parameters)
        self._callback = callback
        self._lines = _sanitize_lines(type(self), help)
        self._descr = coalesce(descr)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    @property
    def arguments(self):
        return tuple(parameter for parameter in self._parameters if isinstance(parameter, Argument))

    @property
    def options(self):
        return tuple(parameter for parameter in self._parameters if isinstance(parameter, Option))

    def __repr__(self):
        return "command(name=%r, parameters=%r)" % (self._name, self._parameters)

    def parse(self, arguments, /):
        """
        Run this command against a full argument list (name first).

        Returns the callback result, or None when help was requested.

        Raises
        - IncorrectCommandNameError: arguments[0] is not this command's name.
        - any other DashbindException via trigger() when not in shell mode.
        """
        arguments = list(arguments)
        if not arguments or arguments[0] != self._name:
            raise IncorrectCommandNameError(
                "%r is not %r" % (arguments[0] if arguments else "", self._name),
                title="incorrect command name",
                name=self._name,
                tool=self,
            )

        if _HELP.flag(arguments):
            self.help()
            return

        try:
            data = CommandData(self._parameters, arguments[1:])
            return self.run(data)
        except IncorrectCommandNameError:
            raise
        except DashbindException as fault:
            self.trigger(fault)

    def run(self, data, /):
        """Hand the bound data to the callback (no-op without one)."""
        if self._callback is Unset:
            return
        return self._callback(data)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags.

        Keyword options override the command flags (tool, shell, fancy, colorful).
        In shell mode the help is printed to stderr first, then the fault, then
        the process exits with status 1. Otherwise the fault is raised.
        """
        options = {
            "tool": self, "shell": self._shell, "fancy": self._fancy, "colorful": self._colorful
        } | options
        fault = copy.replace(fault, **options)
        if options["shell"]:
            self.help(stderr=True)
        trigger(fault)

    def _palette(self):
        styles = defaultdict(str, {
            # === Head ===
            "header-label": "bold #00E6FF",  # CYAN label
            "command-name": "bold #FF4D94",  # MAGENTA-PINK brand pop
            "description-section": "italic #A3A3A3",  # Neutral gray
            "help-line": "#D1D5DB",

            # === Parameters ===
            "argument-name": "bold #00E6FF",
            "option-name": "bold #36C5F0",
            "flag-name": "bold #22C55E",
            "kind": "#9CA3AF",
            "type": "bold #FFD600",  # AMBER for declared types
            "default": "bold #FF4D94",
            "argument-description": "#9CA3AF",

            # === Fancy panel ===
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def text(fragment, style=""):
            if isinstance(fragment, Text):
                return fragment if self._colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        return styler, text

    def _renders(self):
        """
        Build the help sections as a list of rich renderables.

        Layout
            Command: <name>
            <descr>
            <help lines>

              -<argument>  Argument(<Type>) <descr>

              --<flag>     Flag <descr>
              --<option>   Option(<default or Type>) <descr>
        """
        styler, text = self._palette()

        renders = [Text.assemble(text("Command", styler("header-label")), ": ", text(self._name, styler("command-name")))]
        if self._descr:
            renders.append(text(self._descr, styler("description-section")))
        for line in self._lines:
            renders.append(text(line, styler("help-line")))

        padding = 2
        column = padding + 2 + max((len(parameter.consolename) for parameter in self._parameters), default=0)

        def entry(parameter):
            if isinstance(parameter, Argument):
                style = "argument-name"
                kind = Text.assemble(text("Argument", styler("kind")), "(", text(parameter.expected, styler("type")), ")")
            elif parameter.mode == "flag":
                style = "flag-name"
                kind = text("Flag", styler("kind"))
            else:
                style = "option-name"
                shown, tint = (parameter.default, "default") if parameter.default is not None else (parameter.expected, "type")
                kind = Text.assemble(text("Option", styler("kind")), "(", text(shown, styler(tint)), ")")

            line = Text(" " * padding).append(text(parameter.consolename, styler(style)))
            line.append(" " * (column - len(line))).append(kind)
            if parameter.descr:
                line.append(" ").append(text(parameter.descr, styler("argument-description")))
            return line

        for group in (self.arguments, self.options):
            if not group:
                continue
            renders.append(Text(""))
            renders.extend(map(entry, group))

        return renders

    def help(self, *, stderr=False):
        """Render the help of this command to stdout (or stderr)."""
        console = RichConsole(stderr=stderr)
        renderable = Group(*self._renders())
        if self._fancy:
            styler, _ = self._palette()
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self._name} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )
        console.print(renderable)


class HelpCommand(Command):
    """
    Built-in "help" command: token syntax notes followed by every command's help.
    """

    __notes__ = (
        "\tFormat:",
        "\t\t-someArgument=value",
        "\t\t--someOption[=optionalValue]",
        "\t\t--someFlag",
        "\tFor array values use following:",
        "\t\t-someArgument=1,2,3,4",
        "",
        "\tArguments are required to have values",
        "\tOptions may either work only as flags, or as arguments with default values",
        "\tUse --help flag with given command to see its help",
    )

    def __init__(self, commands, /, *, shell=False, colorful=False, fancy=False):
        commands = tuple(commands)
        if not all(isinstance(command, Command) for command in commands):
            raise TypeError("help-command 'commands' must be commands")
        super().__init__("help", (), help=type(self).__notes__, shell=shell, colorful=colorful, fancy=fancy)
        self._commands = commands

    @property
    def commands(self):
        return self._commands

    def run(self, data, /):
        self.help()

    def help(self, *, stderr=False):
        super().help(stderr=stderr)
        for command in self._commands:
            command.help(stderr=stderr)


class Console:
    """
    Dispatcher over a list of commands.

    Parameters
    - arguments: Sequence[str]
      Process arguments; with trim=True the first one (program path) is dropped.
    - commands: Iterable[Command]
      Candidates tried in order; a HelpCommand over them is appended.
    - trim: bool
      Drop arguments[0] before dispatching.
    - shell, colorful, fancy: bool
      Flags of the appended HelpCommand and of the console's own faults
      (NotEnoughArgumentsError, UnknownCommandError). Commands keep the flags
      they were built with, so faults raised while a command binds or runs
      follow that command's shell flag.

    Raises
    - NotEnoughArgumentsError: nothing is left to dispatch on.
    """

    def __init__(self, arguments, commands, /, trim=True, *, shell=False, colorful=False, fancy=False):
        commands = list(commands)
        if not all(isinstance(command, Command) for command in commands):
            raise TypeError("console 'commands' must be commands")
        commands.append(HelpCommand(commands, shell=shell, colorful=colorful, fancy=fancy))

        arguments = list(arguments)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError("console 'arguments' must be strings")
        if trim:
            arguments = arguments[1:]
        if not arguments:
            trigger(NotEnoughArgumentsError(
                "no command was given",
                title="not enough arguments",
                hint="run 'help' to list the available commands",
            ), shell=shell, fancy=fancy, colorful=colorful)

        self._arguments = tuple(arguments)
        self._commands = tuple(commands)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    arguments = mirror("arguments")
    commands = mirror("commands")

    def run(self):
        """
        Parse with the first command whose name matches arguments[0].

        Returns the command that handled the input. When none matches, an
        UnknownCommandError is triggered with close-match suggestions.
        """
        for command in self._commands:
            try:
                command.parse(self._arguments)
            except IncorrectCommandNameError:
                continue
            return command

        name = self._arguments[0]
        suggestions = difflib.get_close_matches(name, [command.name for command in self._commands], 3)
        try:
            hint = "did you mean %r? run 'help' to list the available commands" % suggestions[0]
        except IndexError:
            hint = "run 'help' to list the available commands"
        trigger(UnknownCommandError(
            "%s is an incorrect command" % name,
            title="unknown command",
            hint=hint,
            name=name,
            suggestions=suggestions,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
        ), shell=self._shell, fancy=self._fancy, colorful=self._colorful)


def command(source=Unset, /, *parameters, **metadata):
    """
    Build a Command around a callback, directly or as a decorator.

    Forms
    - @command                       name from the function, no parameters
    - @command("name", *parameters)  explicit name and schema
    - command(callback, ...)          direct mode when the first item is callable

    The callback docstring becomes the command description unless 'descr' is given.
    """
    def wrapper(callback, /, name=Unset):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        options = dict(metadata)
        options.setdefault("descr", inspect.getdoc(callback) or Unset)
        return Command(coalesce(name, callback.__name__), parameters, callback=callback, **options)

    if callable(source):
        return wrapper(source)
    if isinstance(source, str):
        return rename(lambda callback, /: wrapper(callback, source), "command")
    if source is Unset:
        return rename(lambda callback, /: wrapper(callback), "command")
    raise TypeError("command() first argument must be a callable or a name")


def invoke(target, prompt=Unset, /):
    """
    Convenience runner.

    Parameters
    - target: Command | Iterable[Command]
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string, split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.

    Behavior
    - Command: parse [name, *tokens] (the command name is implied).
    - Iterable of commands: dispatch through a Console (tokens start with a name).
    """
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    if isinstance(target, Command):
        return target.parse([target.name, *tokens])
    if isinstance(target, Iterable):
        return Console(tokens, target, trim=False).run()
    raise TypeError("invoke() first argument must be a command or an iterable of commands")


__all__ = (
    "Command",
    "HelpCommand",
    "Console",
    "command",
    "invoke",
)
