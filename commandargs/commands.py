"""
Commandargs command layer: register arguments, parse one invocation, query values.

What this module provides
- CommandArgs: an ordered, name-keyed registry of Argument specifications for one
  command, plus the metadata of the invocation it parsed:
  • app       first token (program or interpreter path)
  • options   tokens between the program and the "--file=<path>" token
  • filename  the script path carried by "--file=<path>"
  • trailing  the user segment, everything after the "--args" separator
- sample_invocation(os): illustrative raw token arrays for documentation and tests.

Invocation layout
    /usr/lib64/R/bin/exec/R --slave --file=script.R --args --name alice --count 3
    └── app ──────────────┘ └ opt ┘ └── filename ─┘        └──── trailing ──────┘

Lifecycle
- construct → add_argument(...) any number of times → parse_arguments(tokens) →
  get()/get_all() any number of times. Parsing again re-runs the whole pass and
  overwrites previous results; get()/get_all() before parsing yield defaults.

Faults
- Argument failures (missing required flag, conversion, choices, too few values)
  never stop the pass: every argument is tried and parse_arguments() returns one
  boolean per argument name.
- Programmer errors (no invocation tokens, lookup of an unregistered name) are fatal.

Quick start
    from commandargs import CommandArgs

    args = CommandArgs(shell=True)
    args.add_argument("name", help="who to greet")
    args.add_argument("count", type="integer", default=1)
    args.add_argument("verbose", flag="-v", type="presence-true", default=False)

    ok = args.parse_arguments(["R", "--file=hello.R", "--args", "--name", "alice"])
    if all(ok.values()):
        print(args.get("name"), args.get("count"))
"""
import datetime
import difflib
import os.path
import sys
import textwrap
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console, Group
from rich.text import Text

from .arguments import Argument
from .faults import *
from .matching import parse_argument
from .utils import *

# Display name used until a script file reveals the real one.
PLACEHOLDER = "program_name"


class CommandArgs:
    """
    Registry and orchestrator of the arguments of one command invocation.

    Runtime flags (keyword-only)
    - shell: render faults on stderr instead of raising exceptions / emitting warnings.
    - fancy: render faults inside panels.
    - colorful: style faults and help output.
    - exit_on_help: exit the process after printing help (see parse_arguments).

    Read-only properties mirror the private state: name, descr, cmdargs, app,
    options, filename, trailing, arguments, results, parsed and the runtime flags.
    Token sequences (cmdargs, options, trailing) are returned as tuples and mappings
    (arguments, results) as read-only proxies; copy them to get mutable containers,
    e.g. list(args.options) == ["--slave"].
    """

    name = mirror("name")
    descr = mirror("descr")
    cmdargs = mirror("cmdargs")
    app = mirror("app")
    options = mirror("options")
    filename = mirror("filename")
    trailing = mirror("trailing")
    arguments = mirror("arguments")
    results = mirror("results")
    parsed = mirror("parsed")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    exit_on_help = mirror("exit_on_help")

    def __init__(
            self,
            args=Unset,
            /,
            name=PLACEHOLDER,
            descr=Unset,
            *,
            shell=True,
            fancy=False,
            colorful=False,
            exit_on_help=True
    ):
        if not isinstance(name, str):
            raise TypeError("command-args 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("command-args 'name' cannot be empty")
        if not isinstance(descr := coalesce(descr), str | None):
            raise TypeError("command-args 'descr' must be a string")

        self._name = name
        self._descr = descr
        self._cmdargs = _sanitized(args) if args is not Unset else []
        self._app = None
        self._options = []
        self._filename = None
        self._trailing = []
        self._arguments = {}
        self._results = {}
        self._parsed = False
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._exit_on_help = bool(exit_on_help)

    def __repr__(self):
        return "command-args(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "cmdargs", self.cmdargs
        yield "app", self.app
        yield "options", self.options
        yield "filename", self.filename
        yield "arguments", tuple(self._arguments.values())

    def trigger(self, fault, /, **options):
        """
        surface a fault with this registry's runtime flags merged in.
        """
        trigger(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def add_argument(self, name=Unset, /, **options):
        """
        Create an Argument from (name, **options) and register it under its name.

        An argument already registered under the same name is replaced; insertion
        order (used by usage text and parsing) is that of the first registration.
        See commandargs.arguments.Argument for the accepted options.
        """
        argument = Argument(name, **options)
        self._arguments[argument.name] = argument
        return argument

    add = add_argument

    def has(self, name, /):
        return name in self._arguments

    def get(self, name, /, *args, **kwargs):
        """
        Return the resolved value of the named argument (see Argument.resolve).

        Extra arguments are forwarded to the argument's action, if any. Asking for
        a name that was never registered is a programmer error (UnknownArgumentError).
        """
        try:
            argument = self._arguments[name]
        except KeyError:
            suggestions = difflib.get_close_matches(str(name), self._arguments.keys(), 5)
            try:
                hint = "did you mean %r? registered arguments: %s" % (suggestions[0], ", ".join(self._arguments))
            except IndexError:
                hint = "register it first with add_argument(%r, ...)" % (name,)
            return self.trigger(UnknownArgumentError(
                "unknown argument %r" % (name,),
                title="unknown argument",
                code=FaultCode.UNKNOWN_ARGUMENT,
                input=name,
                suggestions=suggestions,
                hint=hint,
            ))
        return argument.resolve(*args, **kwargs)

    def get_all(self, *args, **kwargs):
        """
        Return {name: resolved value} for every registered argument, in order.
        """
        return {name: argument.resolve(*args, **kwargs) for name, argument in self._arguments.items()}

    def help_called(self):
        """
        True when "--help" or "-h" is one of the raw invocation tokens.
        """
        if not self._cmdargs:
            return self.trigger(MissingTokensError(
                "no invocation tokens are loaded",
                title="missing invocation tokens",
                code=FaultCode.MISSING_TOKENS,
                hint="pass the tokens to CommandArgs(...) or parse_arguments(...)",
            ))
        return "--help" in self._cmdargs or "-h" in self._cmdargs

    def parse_arguments(self, args=Unset, /, *, quit_if_help=Unset, status=0):
        """
        Parse the raw invocation and match every registered argument.

        parameters
        - args: Iterable[str] | Unset
          raw invocation tokens; replaces the stored ones when given.
        - quit_if_help: bool | Unset
          exit after printing help when "--help"/"-h" is present. Unset defers
          to the registry's exit_on_help flag.
        - status: int
          exit status used when quitting after help.

        behavior
        - app is the first token.
        - the first "--file=<path>" token sets filename, derives the display name from
          its base name while the name is still the placeholder, and everything between
          the program and that token becomes options.
        - everything after the first exact "--args" token is the trailing segment
          (empty when the separator is absent or last).
        - each argument, in registration order, is matched against the trailing
          segment; failures are reported and recorded, never raised.

        returns
        - dict[str, bool]: one success flag per registered argument name.
        """
        if args is not Unset:
            self._cmdargs = _sanitized(args)
        if not self._cmdargs:
            return self.trigger(MissingTokensError(
                "parse_arguments() requires invocation tokens",
                title="missing invocation tokens",
                code=FaultCode.MISSING_TOKENS,
                hint="pass the tokens to CommandArgs(...) or parse_arguments(...)",
            ))

        tokens = self._cmdargs
        self._app = tokens[0]
        self._options = []
        self._filename = None
        for index, token in enumerate(tokens):
            if token.startswith("--file="):
                self._filename = token.removeprefix("--file=")
                self._options = tokens[1:index]
                if self._name == PLACEHOLDER and self._filename:
                    self._name = os.path.basename(self._filename)
                break

        try:
            self._trailing = tokens[tokens.index("--args") + 1:]
        except ValueError:
            self._trailing = []

        self._results = {
            name: parse_argument(
                argument,
                self._trailing,
                tool=self,
                shell=self._shell,
                fancy=self._fancy,
                colorful=self._colorful
            )
            for name, argument in self._arguments.items()
        }
        self._parsed = True

        if self.help_called():
            self.print_help()
            if coalesce(quit_if_help, self._exit_on_help):
                sys.exit(status)

        return dict(self._results)

    def usage(self, command=Unset):
        """
        Return the usage lines: display name followed by every usage fragment,
        wrapped at 80 columns with continuation lines indented by 5.
        """
        line = " ".join([coalesce(command, self._name), *(argument.usage() for argument in self._arguments.values())])
        return textwrap.wrap(line, width=80 - len("Usage: "), subsequent_indent=" " * 5, break_on_hyphens=False)

    def print_help(self, command=Unset, *, console=Unset):
        """
        Render the help text.

        Layout
        - "Usage: <name> [--flag type] ..." (wrapped)
        - the registry description, when set
        - "Argument details follow" and one block per argument (see Argument.details)

        Customization
        - Define a mapping named __styles__ in __main__ to override palette entries
          (usage-label, program-name, usage-section, description-section, group-label).
        """
        console = coalesce(console, Console())
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        renders = []
        lines = self.usage(command)
        head, _, rest = lines[0].partition(" ")
        renders.append(Text.assemble(
            ("Usage: ", styler("usage-label")),
            (head, styler("program-name")),
            (" " + rest if rest else "", styler("usage-section")),
        ))
        renders.extend(Text(line, styler("usage-section")) for line in lines[1:])
        if self._descr:
            renders.append(Text(""))
            renders.append(Text(self._descr, styler("description-section")))
        renders.append(Text(""))
        renders.append(Text("Argument details follow", styler("group-label")))
        renders.extend(argument.details(colorful=self._colorful) for argument in self._arguments.values())
        console.print(Group(*renders))


def _sanitized(tokens, /):
    """
    Return the raw tokens as a list, rejecting anything that is not a string.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("invocation tokens must be an iterable of strings")
    tokens = list(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("invocation tokens must be an iterable of strings")
    return tokens


def sample_invocation(os="linux"):
    """
    Return a typical raw invocation (interpreter, options, script, user arguments).

    The value is a hint for documentation and tests; supported layouts are
    "linux" and "darwin".
    """
    match os.lower():
        case "linux":
            leader = ["/usr/lib64/R/bin/exec/R", "--slave", "--no-restore", "--vanilla"]
        case "darwin":
            leader = [
                "/Library/Frameworks/R.framework/Resources/bin/exec/R",
                "--no-save",
                "--no-restore",
                "--no-site-file",
                "--no-environ",
            ]
        case _:
            raise ValueError("sample_invocation() 'os' must be 'linux' or 'darwin'")
    return leader + [
        "--file=/bipitty/bopitty/boo.Rscript",
        "--args",
        "--foo", "bar",
        "--date", datetime.date.today().strftime("%j"),
        "--version", "v0.00",
    ]


__all__ = (
    "CommandArgs",
    "sample_invocation",
)
