"""Shell integration snippets printed by ``wt init <shell>``.

The picker cannot change the caller's directory, so a shell function
named ``wt`` runs the real program, reads the action line it prints and
performs the ``cd`` itself:

    cd|<path>     change into <path>
    edit|<path>   change into <path> and open the editor there
    info|<path>   print the preview block of <path>

Anything else (including no output on cancel) is passed through.
"""

from typing import Dict, List

from worktree_manager.exceptions import ConfigError

SUBCOMMANDS = ["interactive", "list", "add", "remove", "prune", "preview", "config", "init"]

CONFIG_SUBCOMMANDS = ["init", "show", "set-editor", "set-discovery-paths", "editor"]

_POSIX_HELPERS = r"""__wt_cd() {
    if [ -d "$1" ]; then
        builtin cd "$1" || return 1
    else
        echo "wt: directory not found: $1" >&2
        return 1
    fi
}

__wt_edit() {
    __wt_cd "$1" || return 1
    local editor
    editor=$(command wt config editor 2>/dev/null) || editor="${VISUAL:-${EDITOR:-vi}}"
    eval "$editor ."
}

wt() {
    if [ $# -eq 0 ] || [ "$1" = "interactive" ]; then
        local output
        output=$(command wt "$@")
        local exit_code=$?
        if [ $exit_code -ne 0 ]; then
            return $exit_code
        fi

        case "$output" in
            cd\|*)
                __wt_cd "${output#cd|}"
                ;;
            edit\|*)
                __wt_edit "${output#edit|}"
                ;;
            info\|*)
                command wt preview --path "${output#info|}"
                ;;
            *)
                [ -n "$output" ] && printf '%s\n' "$output"
                ;;
        esac
    else
        command wt "$@"
    fi
}
"""

_BASH_COMPLETION = r"""
_wt_complete() {
    local cur="${COMP_WORDS[COMP_CWORD]}"
    if [ "$COMP_CWORD" -eq 1 ]; then
        COMPREPLY=($(compgen -W "{subcommands}" -- "$cur"))
        return
    fi
    case "${COMP_WORDS[1]}" in
        init)
            COMPREPLY=($(compgen -W "bash zsh fish" -- "$cur"))
            ;;
        config)
            COMPREPLY=($(compgen -W "{config_subcommands}" -- "$cur"))
            ;;
        add)
            COMPREPLY=($(compgen -W "$(git branch --format='%(refname:short)' 2>/dev/null)" -- "$cur"))
            ;;
    esac
}
complete -F _wt_complete wt
"""

_ZSH_COMPLETION = r"""
_wt() {
    if (( CURRENT == 2 )); then
        compadd -- {subcommands}
        return
    fi
    case $words[2] in
        init)
            compadd -- bash zsh fish
            ;;
        config)
            compadd -- {config_subcommands}
            ;;
        add)
            compadd -- ${(f)"$(git branch --format='%(refname:short)' 2>/dev/null)"}
            ;;
    esac
}
compdef _wt wt 2>/dev/null
"""

_FISH = r"""# wt - git worktree manager shell integration (fish)

function __wt_cd
    if test -d $argv[1]
        builtin cd $argv[1]
    else
        echo "wt: directory not found: $argv[1]" >&2
        return 1
    end
end

function __wt_edit
    __wt_cd $argv[1]; or return 1
    set -l editor (command wt config editor 2>/dev/null)
    if test -z "$editor"
        set editor vi
    end
    eval $editor .
end

function wt
    if test (count $argv) -eq 0; or test "$argv[1]" = interactive
        set -l output (command wt $argv)
        set -l exit_code $status
        if test $exit_code -ne 0
            return $exit_code
        end

        switch "$output"
            case 'cd|*'
                __wt_cd (string sub --start 4 -- $output)
            case 'edit|*'
                __wt_edit (string sub --start 6 -- $output)
            case 'info|*'
                command wt preview --path (string sub --start 6 -- $output)
            case '*'
                test -n "$output"; and printf '%s\n' $output
        end
    else
        command wt $argv
    end
end

complete -c wt -f
complete -c wt -n __fish_use_subcommand -a "{subcommands}"
complete -c wt -n "__fish_seen_subcommand_from init" -a "bash zsh fish"
complete -c wt -n "__fish_seen_subcommand_from config" -a "{config_subcommands}"
"""


def _fill(template: str) -> str:
    # str.format would trip over the shell's own braces
    return (
        template
        .replace("{subcommands}", " ".join(SUBCOMMANDS))
        .replace("{config_subcommands}", " ".join(CONFIG_SUBCOMMANDS))
    )


SNIPPETS: Dict[str, str] = {
    "bash": "# wt - git worktree manager shell integration (bash)\n\n" + _POSIX_HELPERS + _fill(_BASH_COMPLETION),
    "zsh": "# wt - git worktree manager shell integration (zsh)\n\n" + _POSIX_HELPERS + _fill(_ZSH_COMPLETION),
    "fish": _fill(_FISH),
}


def supported_shells() -> List[str]:
    return sorted(SNIPPETS)


def shell_init(shell: str) -> str:
    """Return the integration snippet for ``shell``.

    Raises:
        ConfigError: The shell is not supported
    """
    try:
        return SNIPPETS[shell]
    except KeyError:
        raise ConfigError(
            f"unsupported shell '{shell}' (supported: {', '.join(supported_shells())})"
        ) from None
