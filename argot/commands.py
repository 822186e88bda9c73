"""
Argot command layer: declare, compose, and parse CLI command trees.

What this module provides
- Command: a node of a command tree with:
  • Chained option declarations (flag/named/pos/rest) with advisory uniqueness checks.
  • Parent/child wiring to model subcommands (command(child)).
  • A leaf handler invoked with the parsed result (handler(fn)).
  • Token matching: flags, named options, positionals, a rest collector, then
    default/required resolution.
  • Help rendering (usage, description, commands or options block), color-aware.

- Program: the root entry point; seeds its name from the environment and parses
  sys.argv[1:] when called without tokens.

Quick start
    from argot import Command, Program

    program = Program("tool").describe("a small tool")
    program.command(
        Command("build", "compile the project")
        .flag("verbose", short="v", describe="print more")
        .named("jobs", short="j", value="workers", parse=int, default=1)
        .pos("source")
        .rest("extra", required=False)
        .handler(print)
    )

    if __name__ == "__main__":
        program.parse()

Design notes
- Only leaves run the matcher; a node with children only routes by name.
- Fatal faults render, print help, and exit 1 (see faults for the shell=False mode).
- Declaration conflicts are warnings: the declaration is still registered.
"""
import copy
import difflib
import functools
import itertools
import operator
import os.path
import re
import shlex
import sys
from collections import defaultdict, deque
from collections.abc import Iterable

from rich.text import Text

from . import faults
from .faults import *
from .options import Kind, Option, Flag, Named, Pos, Rest
from .utils import *


class CommandType(type):
    """
    Metaclass that gives commands a stable typename and introspectable fields.

    Responsibilities
    - Derive __typename__ from the class name ("Program" -> "program").
    - Expose every name listed in __introspectable__ as a read-only property (mirror()).
    - Provide __repr__/__rich_repr__ limited to __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation, e.g. command(name='build', ...).
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /, *, empty=False):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not (name := name.strip()) and not empty:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    return name


def _sanitize_describe(cls, describe, /):
    if not isinstance(describe, str | Unset):
        raise TypeError(f"{cls.__typename__} 'describe' must be a string")
    return coalesce(describe) and describe.strip() or None


def _resolve_option(cls, source, args, kwargs):
    """
    Return an option record of type cls, built from arguments or passed as-is.
    """
    if isinstance(source, Option):
        if not isinstance(source, cls):
            raise TypeError(f"expected a {cls.__typename__} option, got {type(source).__typename__}")
        if args or kwargs:
            raise TypeError(f"a ready {cls.__typename__} option cannot take extra arguments")
        return source
    return cls(source, *args, **kwargs)


def _tokenize(prompt):
    """
    Normalize a prompt into a list of string tokens.

    - str: split with shell rules (shlex.split).
    - Iterable[str]: copied as-is (empty strings are legitimate positionals).
    """
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if not isinstance(prompt, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    tokens = list(prompt)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse() argument must be a string or an iterable of strings")
    return tokens


def _program_name():
    """
    Display name of the running program: basename of $_, then of sys.argv[0], else "".
    """
    if invoked := os.environ.get("_", ""):
        return os.path.basename(invoked)
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""


class Command(metaclass=CommandType):
    """
    A node in a command tree.

    Responsibilities
    - Declaration: flag/named/pos/rest register options (chained), command attaches children.
    - Routing: parse() descends into a child by name, or matches tokens at a leaf.
    - Matching: flags and named options first, then positionals, then rest and defaults.
    - Rendering: help() prints usage and descriptions, then exits.

    Settings
    - shell, colorful, stdout, stderr are inherited from the parent when not set.
      Defaults: shell=True, colorful=False, and the consoles from argot.faults.
    """

    __introspectable__ = (
        "name",
        "description",
        "callback",
        "parent",
        "children",
        "options",
    )

    __displayable__ = (
        "name",
        "description",
        "children",
        "options",
    )

    def __init__(
            self,
            name,
            /,
            describe=Unset,
            handler=Unset,
            *,
            shell=Unset,
            colorful=Unset,
            stdout=Unset,
            stderr=Unset
    ):
        self._name = _sanitize_name(type(self), name, empty=isinstance(self, Program))
        self._description = _sanitize_describe(type(self), describe)
        self._callback = None
        self._parent = None
        self._children = []
        self._options = {kind: [] for kind in Kind}
        if not isinstance(shell, bool | Unset) or not isinstance(colorful, bool | Unset):
            raise TypeError(f"{type(self).__typename__} 'shell' and 'colorful' must be booleans")
        self._shell = shell
        self._colorful = colorful
        self._stdout = stdout
        self._stderr = stderr
        if handler is not Unset:
            self.handler(handler)

    # ── navigation ─────────────────────────────────────────────────────────

    @property
    def root(self):
        """
        Return the topmost command in the current hierarchy.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        Space-joined names from the root to this command, e.g. 'tool build'.
        """
        return " ".join(step.name for step in self.path if step.name)

    @property
    def _restoption(self):
        """
        The Rest option of this node, or None.
        """
        return next(iter(self._options[Kind.REST]), None)

    # ── settings ───────────────────────────────────────────────────────────

    def _setting(self, name, default):
        for command in reversed(self.path):
            if (object := getattr(command, "_" + name)) is not Unset:
                return object
        return default

    @property
    def shell(self):
        return self._setting("shell", True)

    @property
    def colorful(self):
        return self._setting("colorful", False)

    @property
    def stdout(self):
        return self._setting("stdout", faults.stdout)

    @property
    def stderr(self):
        return self._setting("stderr", faults.stderr)

    # ── registration ───────────────────────────────────────────────────────

    def command(self, child, /):
        """
        Attach a subcommand and return self.

        Children are appended in order and never removed; a command can only
        have one parent.
        """
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} subcommand must be a command")
        if child._parent is not None:
            raise TypeError(f"{type(self).__typename__} {child.name!r} is already attached to {child._parent.name!r}")
        if child in self.path:
            raise ValueError(f"{type(self).__typename__} {child.name!r} cannot be attached under itself")
        child._parent = self
        self._children.append(child)
        return self

    def handler(self, handler, /):
        """
        Set the callable invoked with the parsed result when this leaf is reached.
        """
        if not callable(handler):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        self._callback = handler
        return self

    def describe(self, describe, /):
        self._description = _sanitize_describe(type(self), describe)
        return self

    def flag(self, name, /, *args, **kwargs):
        """
        Declare a Flag (or register a ready one) and return self.
        """
        return self._register(_resolve_option(Flag, name, args, kwargs))

    def named(self, name, /, *args, **kwargs):
        """
        Declare a Named option (or register a ready one) and return self.
        """
        return self._register(_resolve_option(Named, name, args, kwargs))

    def pos(self, name, /, *args, **kwargs):
        """
        Declare a Pos option (or register a ready one) and return self.
        """
        return self._register(_resolve_option(Pos, name, args, kwargs))

    def rest(self, name, /, *args, **kwargs):
        """
        Declare the Rest option (or register a ready one) and return self.

        A node holds at most one Rest; declaring another replaces it with a warning.
        """
        return self._register(_resolve_option(Rest, name, args, kwargs))

    def _register(self, option):
        self._confirm_unique(option)
        if option.kind is Kind.REST:
            if replaced := self._restoption:
                self.trigger(DuplicateRestWarning(
                    "rest option %r replaces rest option %r in %r" % (option.name, replaced.name, self.route),
                    title="duplicate rest option",
                    code=FaultCode.DUPLICATE_REST,
                    option=option,
                    replaced=replaced,
                    hint="declare a single rest option per command",
                    docs=getdoc(FaultCode.DUPLICATE_REST),
                ))
            self._options[Kind.REST][:] = [option]
        else:
            self._options[option.kind].append(option)
        return self

    def _iteroptions(self):
        # Flag, Named, Pos, Rest order (Kind declaration order)
        return itertools.chain.from_iterable(self._options.values())

    def _confirm_unique(self, option):
        """
        Report the first declaration conflict of option against this node, if any.

        Checks (in order)
        - name shared with any declared option
        - short shared with a declared flag or named option
        - named value label shared with another named value label, or with any option name
        - name shared with a declared named value label
        """
        options = list(self._iteroptions())
        switches = self._options[Kind.FLAG] + self._options[Kind.NAMED]
        nameds = self._options[Kind.NAMED]

        if any(other.name == option.name for other in options):
            return self.trigger(DuplicateNameWarning(
                "option name %r is already in use in %r" % (option.name, self.route),
                title="duplicate option name",
                code=FaultCode.DUPLICATE_NAME,
                option=option,
                hint="rename one of them; both stay registered and the first declared wins when matching",
                docs=getdoc(FaultCode.DUPLICATE_NAME),
            ))

        if option.kind in (Kind.FLAG, Kind.NAMED) and option.short:
            if any(other.short == option.short for other in switches):
                return self.trigger(DuplicateShortWarning(
                    "short name '-%s' of option %r is already in use in %r" % (option.short, option.name, self.route),
                    title="duplicate short name",
                    code=FaultCode.DUPLICATE_SHORT,
                    option=option,
                    hint="pick another single character for %r" % option.name,
                    docs=getdoc(FaultCode.DUPLICATE_SHORT),
                ))

        if option.kind is Kind.NAMED and option.value:
            if any(other.value == option.value for other in nameds):
                message = "value label %r of option %r is already the value label of another named option" % (
                    option.value, option.name
                )
            elif any(other.name == option.value for other in options):
                message = "value label %r of option %r collides with an option name" % (option.value, option.name)
            else:
                return None
        elif clash := next((other for other in nameds if other.value == option.name), None):
            message = "option name %r collides with the value label of named option %r" % (option.name, clash.name)
        else:
            return None

        return self.trigger(DuplicateValueLabelWarning(
            message,
            title="duplicate value label",
            code=FaultCode.DUPLICATE_VALUE_LABEL,
            option=option,
            hint="result keys must be unique; rename the label or the option",
            docs=getdoc(FaultCode.DUPLICATE_VALUE_LABEL),
        ))

    # ── faults ─────────────────────────────────────────────────────────────

    def trigger(self, fault, /, **options):
        """
        Surface a fault in the context of this command.

        Warnings are reported and control returns to the caller. Errors are
        reported, then help is printed and the process exits with status 1
        (in shell=False mode the error is raised instead).
        """
        trigger(
            fault,
            **options,
            tool=self,
            shell=self.shell,
            colorful=self.colorful,
            stdout=self.stdout,
            stderr=self.stderr,
        )
        if isinstance(fault, CommandException):
            self.help(1)

    # ── parsing ────────────────────────────────────────────────────────────

    def parse(self, tokens, /):
        """
        Route or match a token vector.

        Order
        1. '-h' or '--help' as the first token prints help and exits 0.
        2. With children: the first token picks a child by exact name and the
           tail is parsed there; no token or an unknown name is fatal.
        3. Leaf with a parent: the handler receives the parsed result and None is
           returned; without a handler a warning is emitted and nothing is matched.
        4. Leaf without a parent: the parsed result is returned.

        Parameters
        - tokens: str (split with shell rules) or Iterable[str].
        """
        tokens = _tokenize(tokens)

        if tokens[:1] in (["-h"], ["--help"]):
            self.help(0)

        if self._children:
            if not tokens:
                typeof = "subcommand" if self._parent else "command"
                self.trigger(MissingCommandError(
                    "no %s given to %r" % (typeof, self.route),
                    title="missing %s" % typeof,
                    code=FaultCode.MISSING_COMMAND,
                    hint="run '%s --help' to see available %ss" % (self.route, typeof),
                    docs=getdoc(FaultCode.MISSING_COMMAND),
                ))
                return None

            input, *tail = tokens
            for child in self._children:
                if child.name == input:
                    return child.parse(tail)

            names = [child.name for child in self._children]
            suggestions = difflib.get_close_matches(input, names, 5)
            typeof = "subcommand" if self._parent else "command"
            try:
                hint = "did you mean %r? you can also run '%s --help' to see available %ss" % (
                    suggestions[0], self.route, typeof
                )
            except IndexError:
                hint = "run '%s --help' to see available %ss" % (self.route, typeof)
            self.trigger(UnknownCommandError(
                "unknown %s %r" % (typeof, input),
                title="unknown %s" % typeof,
                code=FaultCode.UNKNOWN_COMMAND,
                input=input,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            ))
            return None

        if self._parent is not None:
            if self._callback is None:
                self.trigger(UnconfiguredHandlerWarning(
                    "command %r has no handler" % self.route,
                    title="unconfigured handler",
                    code=FaultCode.UNCONFIGURED_HANDLER,
                    hint="attach one with .handler(callable)",
                    docs=getdoc(FaultCode.UNCONFIGURED_HANDLER),
                ))
                return None
            self._callback(self._matchargs(tokens))
            return None

        return self._matchargs(tokens)

    def _matchflag(self, token):
        """
        Return the flag matching '--name' or '-short', or None.
        """
        if token.startswith("--"):
            name, long = token[2:], True
        else:
            name, long = token[1:], False
        for flag in self._options[Kind.FLAG]:
            if (flag.name if long else flag.short) == name:
                return flag
        return None

    def _matchnamed(self, token, tokens):
        """
        Return (named, raw value) for '--name=value' or '-short value', else (None, None).

        The short form consumes the next token from `tokens`, and only matches
        when there is one; otherwise the token falls through to the positionals.
        """
        if token.startswith("--"):
            name, separator, value = token[2:].partition("=")
            if not separator:
                return None, None
            for named in self._options[Kind.NAMED]:
                if named.name == name:
                    return named, value
        else:
            if not tokens:
                return None, None
            for named in self._options[Kind.NAMED]:
                if named.short == token[1:]:
                    return named, tokens.popleft()
        return None, None

    def _coerce(self, option, value):
        """
        Run the option converter on a raw value; a failing converter is fatal.
        """
        if option.parse is None:
            return value
        try:
            return option.parse(value)
        except Exception as exception:
            self.trigger(ValueCoercionError(
                "cannot convert %r for option %r: %s" % (value, option.name, exception),
                title="invalid value",
                code=FaultCode.VALUE_COERCION,
                option=option,
                value=value,
                exception=exception,
                hint="check the expected format of %r or run '%s --help'" % (option.name, self.route),
                docs=getdoc(FaultCode.VALUE_COERCION),
            ))

    def _matchargs(self, tokens):
        """
        Match tokens against this node's options and return a fresh result dict.

        phases
        - switches: each '-'-prefixed token tries flags first, then named options.
        - positionals: unmatched tokens, in encounter order, fill Pos options in
          declaration order; leftovers go to Rest or are reported and dropped.
        - resolution: absent keys take their default; absent required ones are fatal.
        """
        namespace = {}
        positionals = deque()
        tokens = deque(tokens)

        while tokens:
            token = tokens.popleft()
            if token.startswith("-"):
                if flag := self._matchflag(token):
                    namespace[flag.name] = True
                    continue
                named, value = self._matchnamed(token, tokens)
                if named:
                    namespace[named.key] = self._coerce(named, value)
                    continue
            positionals.append(token)

        for option in self._options[Kind.POS]:
            if not positionals:
                break
            namespace[option.name] = self._coerce(option, positionals.popleft())

        if positionals:
            if rest := self._restoption:
                namespace[rest.name] = [self._coerce(rest, value) for value in positionals]
            else:
                self.trigger(ExtraneousPositionalWarning(
                    "extraneous positional %s: %s" % (
                        pluralize("argument") if len(positionals) > 1 else "argument",
                        " ".join(positionals),
                    ),
                    title="extraneous positional",
                    code=FaultCode.EXTRANEOUS_POSITIONAL,
                    leftover=list(positionals),
                    hint="remove the extra values or run '%s --help' to see the expected usage" % self.route,
                    docs=getdoc(FaultCode.EXTRANEOUS_POSITIONAL),
                ))

        for option in self._iteroptions():
            if option.key in namespace:
                continue
            if option.defaulted:
                namespace[option.key] = copy.copy(option._default)
            elif option.required:
                self.trigger(MissingRequiredOptionError(
                    "missing required %s %r" % (_KINDS[option.kind], option.name),
                    title="missing required option",
                    code=FaultCode.MISSING_REQUIRED_OPTION,
                    option=option,
                    hint="add %s or run '%s --help' to see the expected usage" % (_overview(option), self.route),
                    docs=getdoc(FaultCode.MISSING_REQUIRED_OPTION),
                ))

        return namespace

    # ── help ───────────────────────────────────────────────────────────────

    def helptext(self):
        """
        Build the help text of this command as a rich Text (no I/O).

        Layout (leaf)
            Usage: <route> <overview>
            <description>
            Options:
              <label>    [required] <describe>

        Layout (with children)
            Usage: <route> [command] [arguments]
            <description>
            Commands:
              - <name>    <describe>

        Sections are separated by blank lines; labels are padded to the longest
        one plus four columns. Define __styles__ in __main__ to override palette
        entries; styling only applies when colorful is True.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "flag-name": "bold #22C55E",
            "named-name": "bold #00E6FF",
            "pos-name": "bold #FFD600",
            "rest-name": "bold italic #FFD600",
            "required-marker": "bold #EF4444",
            "argument-description": "#9CA3AF",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if self.colorful else "")

        lines = [Text()]
        usage = Text.assemble(text("Usage", "usage-label"), ": ", text(self.route, "program-name"))

        if self._children:
            usage.append(" ").append(text("[command] [arguments]", "usage-section"))
            lines.append(usage)
            if self._description:
                lines += [Text(), text(self._description, "description-section")]

            typeof = "subcommand" if self._parent else "command"
            lines += [Text(), Text.assemble(text(pluralize(typeof).title(), "group-label"), ":"), Text()]
            width = max(len(child.name) for child in self._children) + 4
            for child in self._children:
                line = Text.assemble("  - ", text(child.name, "children"), " " * (width - len(child.name)))
                if child.description:
                    line.append(text(child.description, "children-description"))
                line.rstrip()
                lines.append(line)
        else:
            options = list(self._iteroptions())
            if options:
                usage.append(" ").append(text(" ".join(map(_overview, options)), "usage-section"))
            lines.append(usage)
            if self._description:
                lines += [Text(), text(self._description, "description-section")]

            if options:
                lines += [Text(), Text.assemble(text("Options", "group-label"), ":"), Text()]
                labels = [_label(option) for option in options]
                width = max(map(len, labels)) + 4
                for option, label in zip(options, labels):
                    line = Text.assemble("  ", text(label, "%s-name" % option.kind.value), " " * (width - len(label)))
                    if option.required:
                        line.append(text("[required]", "required-marker")).append(" ")
                    if option.describe:
                        line.append(text(option.describe, "argument-description"))
                    line.rstrip()
                    lines.append(line)

        lines.append(Text())
        return Text("\n").join(lines)

    def help(self, code=0, /):
        """
        Print the help text on the stdout console and exit with `code`.
        """
        self.stdout.print(self.helptext())
        sys.exit(code)


_KINDS = {
    Kind.FLAG: "flag",
    Kind.NAMED: "named option",
    Kind.POS: "positional",
    Kind.REST: "rest option",
}


def _overview(option):
    """
    Usage-line form of an option, bracketed when it is not required.
    """
    match option.kind:
        case Kind.FLAG:
            form = "-%s" % option.short if option.short else "--%s" % option.name
        case Kind.NAMED:
            label = option.value or "value"
            form = "-%s %s" % (option.short, label) if option.short else "--%s=%s" % (option.name, label)
        case Kind.POS:
            form = option.name
        case Kind.REST:
            form = "...%s" % option.name
        case _:
            raise RuntimeError("unexpected option kind")
    return form if option.required else "[%s]" % form


def _label(option):
    """
    Options-block label of an option.
    """
    match option.kind:
        case Kind.FLAG:
            return ", ".join(filter(None, ("-%s" % option.short if option.short else None, "--%s" % option.name)))
        case Kind.NAMED:
            names = " ".join(filter(None, ("-%s" % option.short if option.short else None, "--%s" % option.name)))
            return "%s<%s>" % (names, option.value or "value")
        case Kind.POS:
            return option.name
        case Kind.REST:
            return "...%s" % option.name
        case _:
            raise RuntimeError("unexpected option kind")


class Program(Command):
    """
    Root command of a CLI.

    The name defaults to the invoking program (basename of $_ or sys.argv[0]),
    and parse() reads sys.argv[1:] when called without tokens.
    """

    def __init__(
            self,
            name=Unset,
            /,
            describe=Unset,
            handler=Unset,
            *,
            shell=Unset,
            colorful=Unset,
            stdout=Unset,
            stderr=Unset
    ):
        super().__init__(
            coalesce(name, _program_name()),
            describe,
            handler,
            shell=shell,
            colorful=colorful,
            stdout=stdout,
            stderr=stderr,
        )

    def program(self, name, /):
        """
        Override the program name shown in usage lines and messages.
        """
        self._name = _sanitize_name(type(self), name, empty=True)
        return self

    def parse(self, tokens=Unset, /):
        return super().parse(sys.argv[1:] if tokens is Unset else tokens)


__all__ = (
    "Command",
    "Program",
)

del CommandType
