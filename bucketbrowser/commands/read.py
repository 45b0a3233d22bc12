def _resolve_one(app, args, usage, want_folder=None):
    if len(args) != 1:
        print(f"Usage: {usage}")
        return None
    try:
        _, node = app.resolve(args[0], want_folder=want_folder)
    except LookupError as e:
        print(f"Error: {e}")
        return None
    if node is None:
        print("Error: The bucket root is not an object.")
    return node


def do_open(app, *args):
    """Download an object into the local cache (once) and open it."""
    node = _resolve_one(app, args, "open <file>", want_folder=False)
    if node is None:
        return
    if node.is_folder:
        print(f"Error: Invalid file path for open: {args[0]}")
        return
    app.adapter.open_node(node)


def do_reveal(app, *args):
    """Show the cached copy of an object in the system file manager."""
    node = _resolve_one(app, args, "reveal <file>", want_folder=False)
    if node is None:
        return
    app.adapter.reveal_node(node)


def do_path(app, *args):
    """Copy the s3:// address of a file or folder."""
    node = _resolve_one(app, args, "path <file_or_folder>")
    if node is None:
        return
    app.adapter.show_path(node)
