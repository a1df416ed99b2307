"""Shell completion scripts generated from the command-line parser."""

from __future__ import annotations

import argparse
import re
from typing import Any, Dict, List, Tuple

COMPLETION_COMMAND_NAME = "completion"
BASH_SHELL = "bash"
ZSH_SHELL = "zsh"
FISH_SHELL = "fish"
POWERSHELL = "powershell"
SHELLS = (BASH_SHELL, ZSH_SHELL, FISH_SHELL, POWERSHELL)

_LONG_TEXT = """To enable shell autocompletion:

Bash:
  $ source <(searchctl completion bash)

Zsh:
  $ searchctl completion zsh > "${fpath[1]}/_searchctl"
  You will need to start a new shell for this setup to take effect.

Fish:
  $ searchctl completion fish | source

Powershell:
  PS> searchctl completion powershell | Out-String | Invoke-Expression
"""

_BASH = """# bash completion for __PROG__
__FN__() {
    local cur word cmd_path="" words=""
    cur="${COMP_WORDS[COMP_CWORD]}"
    for word in "${COMP_WORDS[@]:1:COMP_CWORD-1}"; do
        case "$word" in
            -*) ;;
            *) cmd_path="${cmd_path:+$cmd_path }$word" ;;
        esac
    done
    case "$cmd_path" in
__CASES__
    esac
    COMPREPLY=( $(compgen -W "$words" -- "$cur") )
}
complete -F __FN__ __PROG__
"""

_ZSH = """#compdef __PROG__
__FN__() {
    local word cmd_path=""
    local -a candidates
    for word in "${words[@]:1:CURRENT-2}"; do
        [[ $word == -* ]] || cmd_path="${cmd_path:+$cmd_path }$word"
    done
    case "$cmd_path" in
__CASES__
    esac
    compadd -- $candidates
}
compdef __FN__ __PROG__
"""

_FISH = """# fish completion for __PROG__
function __FN__
    set -l tokens (commandline -opc)
    set -e tokens[1]
    set -l cmd_path
    for token in $tokens
        string match -q -- '-*' $token; or set -a cmd_path $token
    end
    switch (string join ' ' $cmd_path)
__CASES__
    end
end
complete -c __PROG__ -f -a '(__FN__)'
"""

_POWERSHELL = """# powershell completion for __PROG__
Register-ArgumentCompleter -Native -CommandName '__PROG__' -ScriptBlock {
    param($wordToComplete, $commandAst, $cursorPosition)
    $elements = @($commandAst.CommandElements | Select-Object -Skip 1 | ForEach-Object { $_.ToString() })
    if ($wordToComplete) { $elements = @($elements | Select-Object -SkipLast 1) }
    $cmdPath = ($elements | Where-Object { -not $_.StartsWith('-') }) -join ' '
    $candidates = switch ($cmdPath) {
__CASES__
        default { @() }
    }
    $candidates | Where-Object { $_ -like "$wordToComplete*" } | ForEach-Object {
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }
}
"""

Tree = Dict[Tuple[str, ...], List[str]]


def _command_tree(parser: argparse.ArgumentParser) -> Tree:
    tree: Tree = {}

    def visit(current: argparse.ArgumentParser, path: Tuple[str, ...]) -> None:
        words: List[str] = []
        tree[path] = words
        for action in current._actions:
            words.extend(action.option_strings)
            choices = action.choices
            if isinstance(choices, dict):
                for name, child in choices.items():
                    words.append(name)
                    visit(child, path + (name,))
            elif choices and not action.option_strings:
                words.extend(str(choice) for choice in choices)

    visit(parser, ())
    return tree


def _function_name(prog: str) -> str:
    return "__" + re.sub(r"\W", "_", prog) + "_complete"


def _bash_cases(tree: Tree) -> str:
    return "\n".join(
        f'        "{" ".join(path)}") words="{" ".join(words)}" ;;'
        for path, words in tree.items()
    )


def _zsh_cases(tree: Tree) -> str:
    return "\n".join(
        f'        "{" ".join(path)}") candidates=({" ".join(words)}) ;;'
        for path, words in tree.items()
    )


def _fish_cases(tree: Tree) -> str:
    return "\n".join(
        f"        case '{' '.join(path)}'\n            printf '%s\\n' {' '.join(words)}"
        for path, words in tree.items()
        if words
    )


def _powershell_cases(tree: Tree) -> str:
    return "\n".join(
        f"        '{' '.join(path)}' {{ @({', '.join(repr(word) for word in words)}) }}"
        for path, words in tree.items()
    )


_TEMPLATES = {
    BASH_SHELL: (_BASH, _bash_cases),
    ZSH_SHELL: (_ZSH, _zsh_cases),
    FISH_SHELL: (_FISH, _fish_cases),
    POWERSHELL: (_POWERSHELL, _powershell_cases),
}


def generate_completion(shell: str, parser: argparse.ArgumentParser) -> str:
    """Return a completion script for ``shell`` covering every command of ``parser``."""
    try:
        template, cases = _TEMPLATES[shell]
    except KeyError:
        raise ValueError(
            f"unsupported shell {shell!r}; choose one of {', '.join(SHELLS)}"
        ) from None
    prog = parser.prog.split()[0]
    tree = _command_tree(parser)
    return (
        template.replace("__CASES__", cases(tree))
        .replace("__FN__", _function_name(prog))
        .replace("__PROG__", prog)
    )


def _run_completion(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    print(generate_completion(args.shell, parser), end="")


def add_completion_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register ``completion``; it stores ``run(args, parser)`` with the root parser."""
    parser = subparsers.add_parser(
        COMPLETION_COMMAND_NAME,
        help="Generate completion script for your shell",
        description=_LONG_TEXT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("shell", choices=SHELLS)
    parser.set_defaults(command_name=COMPLETION_COMMAND_NAME, run=_run_completion)
    return parser