from ..formatting import format_tree_item


def do_ls(app, *args):
    """List the folder or file at path (default: current folder)."""
    detailed = False
    arg_list = list(args)
    while arg_list and arg_list[0].startswith('-'):
        opt = arg_list.pop(0)
        if opt == '-l':
            detailed = True
        elif opt == '--help':
            print("Usage: ls [-l] [path]")
            return
        else:
            print(f"Invalid option: {opt}")
            return

    path = ' '.join(arg_list)
    try:
        stack, node = app.resolve(path)
    except LookupError as e:
        print(f"Error: {e}")
        return

    if node is not None and not node.is_folder:
        print(format_tree_item(app.adapter.get_tree_item(node), detailed))
        return

    folder = stack[-1] if stack else None
    nodes = app.children_of(folder)
    if not nodes:
        print("No objects found.")
        return
    print('\n'.join(format_tree_item(app.adapter.get_tree_item(n), detailed) for n in nodes))


def do_cd(app, *args):
    """Change the current folder."""
    if len(args) > 1:
        print("Usage: cd <path>")
        return
    path = args[0] if args else '/'
    try:
        stack, node = app.resolve(path, want_folder=True)
    except LookupError as e:
        print(f"Error: {e}")
        return
    if node is not None and not node.is_folder:
        print(f"Error: Not a folder: {path}")
        return
    app.folder_stack = stack


# ---------------------------------------------------------------------------
# tree: visual folder tree
# ---------------------------------------------------------------------------

def _render_tree(app, folder, max_depth, current_depth, line_prefix):
    lines = []
    entries = app.children_of(folder)
    for idx, node in enumerate(entries):
        is_last = (idx == len(entries) - 1)
        connector = '└── ' if is_last else '├── '
        lines.append(line_prefix + connector + node.label + ('/' if node.is_folder else ''))

        if node.is_folder and current_depth < max_depth:
            extension = '    ' if is_last else '│   '
            lines.extend(_render_tree(app, node, max_depth, current_depth + 1, line_prefix + extension))
    return lines


def do_tree(app, *args):
    """Display the folder tree below path.

    Usage: tree [path] [--depth N]
    Options:
      --depth N   Max depth to display (default: 2)
    """
    arg_list = list(args)
    path = None
    depth = 2

    i = 0
    while i < len(arg_list):
        arg = arg_list[i]
        if arg == '--depth' and i + 1 < len(arg_list):
            try:
                depth = int(arg_list[i + 1])
            except ValueError:
                print("Invalid depth: " + arg_list[i + 1])
                return
            i += 2
        elif arg == '--help':
            print("Usage: tree [path] [--depth N]")
            return
        elif not arg.startswith('-') and path is None:
            path = arg
            i += 1
        else:
            print("Unknown option: " + arg)
            return

    try:
        stack, node = app.resolve(path or '', want_folder=True)
    except LookupError as e:
        print(f"Error: {e}")
        return
    if node is not None and not node.is_folder:
        print(f"Error: Not a folder: {path}")
        return

    folder = stack[-1] if stack else None
    print(folder.uri if folder is not None else app.root_uri())
    for line in _render_tree(app, folder, depth, 1, ''):
        print(line)
