import shlex

from prompt_toolkit.completion import Completer, Completion


class BucketBrowserCompleter(Completer):
    path_commands = {'ls', 'cd', 'tree', 'open', 'reveal', 'path'}
    folder_only_commands = {'cd', 'tree'}

    def __init__(self, bucket_browser_app):
        self.app = bucket_browser_app

    def _get_suggestions(self, dir_part, include_files=True):
        """Labels under dir_part, folders with a trailing slash."""
        try:
            stack, node = self.app.resolve(dir_part, want_folder=True)
            if node is not None and not node.is_folder:
                return []
            folder = stack[-1] if stack else None
            suggestions = []
            for n in self.app.children_of(folder):
                if n.is_folder:
                    suggestions.append(n.label + '/')
                elif include_files:
                    suggestions.append(n.label)
            return suggestions
        except Exception:
            return []

    def get_completions(self, document, complete_event):
        text_before_cursor = document.text_before_cursor
        word = document.get_word_before_cursor(WORD=True)

        try:
            parts = shlex.split(text_before_cursor)
        except ValueError:
            parts = text_before_cursor.split()
        num_parts = len(parts)

        completing_new_word = text_before_cursor.endswith(' ')

        # --- Completing the command name ---
        if num_parts == 0 or (num_parts == 1 and not completing_new_word):
            for cmd in sorted(self.app.commands.keys()):
                if cmd.startswith(word):
                    yield Completion(cmd, start_position=-len(word))
            return

        # --- Completing a path argument ---
        command = parts[0].lower()
        if command not in self.path_commands:
            return
        if not ((num_parts == 1 and completing_new_word) or (num_parts == 2 and not completing_new_word)):
            return

        path_to_complete = '' if completing_new_word else parts[1]
        start_pos = 0 if completing_new_word else -len(word)

        if '/' in path_to_complete:
            dir_part, partial = path_to_complete.rsplit('/', 1)
            dir_part += '/'
        else:
            dir_part = ''
            partial = path_to_complete

        include_files = command not in self.folder_only_commands
        for s in self._get_suggestions(dir_part, include_files=include_files):
            if s.startswith(partial):
                yield Completion(dir_part + s, start_position=start_pos)
