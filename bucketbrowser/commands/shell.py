import json
import os

from .. import config as config_mod


COMMAND_HELP = {
    'ls': """ls [-l] [path]
  List folders and files.
  -l              Show file sizes""",

    'cd': """cd <path>
  Change the current folder.
  cd ..           Go up one level
  cd /            Go to the configured root""",

    'tree': """tree [path] [--depth N]
  Display a visual folder tree with box-drawing characters.
  --depth N       Max depth to display (default: 2)""",

    'open': """open <file>
  Download a file into the local cache (first time only) and open it
  with the system viewer.""",

    'reveal': """reveal <file>
  Show the cached copy of a file in the system file manager.
  The file must have been opened before.""",

    'path': """path <file_or_folder>
  Copy the full s3:// address of an entry to the clipboard.""",

    'refresh': """refresh
  Drop remembered listings and list again from the bucket.""",

    'set': """set <bucket|prefix> <value>
  Change a setting for this session. The tree is refreshed.""",

    'config': """config
  Show the active settings.""",

    'help': """help [command]
  Show available commands or detailed help for a specific command.""",

    'clear': """clear
  Clear the terminal screen.""",

    'exit': """exit
  Exit BucketBrowser.""",

    'quit': """quit
  Exit BucketBrowser (alias for exit).""",
}


COMMAND_CATEGORIES = [
    ('Navigation', ['ls', 'cd', 'tree', 'refresh']),
    ('Files', ['open', 'reveal', 'path']),
    ('Settings', ['set', 'config']),
    ('Shell', ['help', 'clear', 'exit', 'quit']),
]

SETTABLE = ('bucket', 'prefix')


def do_exit(app, *args):
    """Exit the shell."""
    print("Exiting...")
    return False


def do_clear(app, *args):
    """Clear the terminal screen."""
    os.system('cls' if os.name == 'nt' else 'clear')


def do_refresh(app, *args):
    """Forget listings and go back to the root."""
    app.folder_stack = []
    app.adapter.refresh()
    print("Tree refreshed.")


def do_set(app, *args):
    """Change the bucket or base prefix."""
    if len(args) not in (1, 2) or args[0] not in SETTABLE:
        print("Usage: set <bucket|prefix> <value>")
        return
    name = args[0]
    value = args[1] if len(args) == 2 else ''
    config = config_mod.apply_overrides(app.adapter.config, **{name: value})
    app.folder_stack = []
    app.adapter.on_config_changed(config)
    print(f"{name} = {value!r}")


def do_config(app, *args):
    """Show the active settings."""
    print(json.dumps(app.adapter.config.get('general', {}), indent=2, default=str))


def do_help(app, *args):
    """Show available commands or detailed help for a specific command."""
    if args:
        cmd_name = args[0].lower()
        if cmd_name in COMMAND_HELP:
            print()
            print(COMMAND_HELP[cmd_name])
            print()
        elif cmd_name in app.commands:
            print("  No detailed help available for '%s'." % cmd_name)
        else:
            print("  Unknown command: %s" % cmd_name)
        return

    print("\nBucketBrowser Commands:\n")
    for category, cmds in COMMAND_CATEGORIES:
        available = [c for c in cmds if c in app.commands]
        if available:
            print("  \033[1m%s\033[0m" % category)
            print("    " + '  '.join(available))
            print()
    print("Type 'help <command>' for detailed usage. Use TAB for completion.")
