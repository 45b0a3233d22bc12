import os
import platform
import shlex
import shutil
import subprocess
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import CompleteStyle

from . import config as config_mod
from .commands.navigation import do_cd, do_ls, do_tree
from .commands.read import do_open, do_path, do_reveal
from .commands.shell import do_clear, do_config, do_exit, do_help, do_refresh, do_set
from .completer import BucketBrowserCompleter
from .tree import Notifier, TreeAdapter

CLIPBOARD_COMMANDS = [
    ['pbcopy'],
    ['wl-copy'],
    ['xclip', '-selection', 'clipboard'],
    ['clip'],
]


def open_with_system(path):
    """Hand a file or directory to the platform's default application."""
    if platform.system() == 'Windows':
        os.startfile(path)
    elif platform.system() == 'Darwin':
        subprocess.run(['open', path], check=True)
    else:
        subprocess.run(['xdg-open', path], check=True)


class TerminalNotifier(Notifier):
    def __init__(self, launch=True):
        self.launch = launch

    def info(self, message):
        print(message)

    def error(self, message):
        print(f"Error: {message}")

    def prompt_config(self, message):
        print(message)

    def _launch(self, path):
        if not self.launch:
            return
        try:
            open_with_system(path)
        except FileNotFoundError:
            print("Error: Could not find system command ('open' or 'xdg-open').")
        except subprocess.CalledProcessError as e:
            print(f"Error opening with system command: {e}")

    def show_file(self, path):
        print(f"Opening {path}...")
        self._launch(path)

    def reveal(self, directory):
        print(f"Revealing {directory}...")
        self._launch(directory)

    def copy_text(self, text):
        for cmd in CLIPBOARD_COMMANDS:
            if shutil.which(cmd[0]):
                try:
                    subprocess.run(cmd, input=text, text=True, check=True)
                    return
                except (OSError, subprocess.CalledProcessError) as e:
                    print(f"Warning: {cmd[0]} failed: {e}", file=sys.stderr)
        print(text)

    def status(self, text, tooltip=''):
        print(f"[{text}] {tooltip}".rstrip(), file=sys.stderr)


class BucketBrowserApp:
    def __init__(self, adapter: TreeAdapter, history_path=None):
        self.adapter = adapter
        self.folder_stack = []  # TreeNodes from the configured root down to the current folder
        self.children = {}  # {full_key or None: [TreeNode]}, dropped on refresh
        self.history_path = history_path or os.path.join(
            os.path.expanduser("~"), ".bucketbrowser_history"
        )
        self.session = None
        self.adapter.on_did_change(self._on_tree_changed)
        # Commands map to functions that take (app, *args)
        self.commands = {
            'exit': lambda *args: do_exit(self, *args),
            'quit': lambda *args: do_exit(self, *args),
            'ls': lambda *args: do_ls(self, *args),
            'cd': lambda *args: do_cd(self, *args),
            'tree': lambda *args: do_tree(self, *args),
            'open': lambda *args: do_open(self, *args),
            'reveal': lambda *args: do_reveal(self, *args),
            'path': lambda *args: do_path(self, *args),
            'refresh': lambda *args: do_refresh(self, *args),
            'set': lambda *args: do_set(self, *args),
            'config': lambda *args: do_config(self, *args),
            'clear': lambda *args: do_clear(self, *args),
            'help': lambda *args: do_help(self, *args),
        }

    @property
    def current_folder(self):
        return self.folder_stack[-1] if self.folder_stack else None

    def _on_tree_changed(self):
        self.children.clear()

    def children_of(self, folder):
        """Children of a folder node (None for the root), remembered until the next refresh."""
        memo_key = folder.full_key if folder is not None else None
        if memo_key not in self.children:
            nodes = self.adapter.get_children(folder)
            if not nodes:
                # Empty results may be errors or a missing bucket; ask again next time.
                return nodes
            self.children[memo_key] = nodes
        return self.children[memo_key]

    def resolve(self, path, want_folder=None):
        """Walk a slash separated path of labels from the current folder.

        Returns (folder_stack, node); node is None when the path names the
        root. Raises LookupError for unknown names.
        """
        if path.startswith('/'):
            stack = []
        else:
            stack = list(self.folder_stack)
        parts = [p for p in path.split('/') if p and p != '.']
        node = stack[-1] if stack else None
        for idx, part in enumerate(parts):
            if part == '..':
                if stack:
                    stack.pop()
                node = stack[-1] if stack else None
                continue
            parent = stack[-1] if stack else None
            matches = [n for n in self.children_of(parent) if n.label == part]
            if not matches:
                raise LookupError(f"No such file or folder: {path}")
            if want_folder is not None and idx == len(parts) - 1:
                preferred = [n for n in matches if n.is_folder == want_folder]
                matches = preferred or matches
            node = matches[0]
            if node.is_folder:
                stack.append(node)
            elif idx != len(parts) - 1:
                raise LookupError(f"Not a folder: {part}")
        return stack, node

    def root_uri(self):
        bucket = config_mod.get_bucket(self.adapter.config)
        if not bucket:
            return 's3://'
        return f's3://{bucket}/{config_mod.get_prefix(self.adapter.config)}'

    def get_prompt(self):
        if self.current_folder is not None:
            return f'{self.current_folder.uri}> '
        return f'{self.root_uri()}> '

    def run(self):
        """Main loop to run the shell application."""
        self.session = PromptSession(
            history=FileHistory(self.history_path),
            completer=BucketBrowserCompleter(self),
            complete_style=CompleteStyle.COLUMN,
        )
        print("BucketBrowser Shell. Type 'help' or 'exit'.")
        while True:
            try:
                with patch_stdout():
                    text = self.session.prompt(self.get_prompt())
                if not text.strip():
                    continue
                if not self.handle_command(text):
                    break
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nExiting...")
                break

    def handle_command(self, text):
        """Parse and execute the entered command."""
        try:
            parts = shlex.split(text.strip())
            if not parts:
                return True

            command_name = parts[0].lower()
            args = parts[1:]

            if command_name in self.commands:
                should_continue = self.commands[command_name](*args)
                return should_continue if should_continue is not None else True
            else:
                print(f"Unknown command: {command_name}")
                return True
        except Exception as e:
            print(f"Error processing command: {e}")
            return True
