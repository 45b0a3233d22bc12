import os
import platform

from .nodes import CollapsibleState, TreeItem


FILE_ICON_MAP = {
    '.txt': '📄', '.md': '📄', '.pdf': '📄', '.log': '📄',
    '.jpg': '🖼', '.jpeg': '🖼', '.png': '🖼', '.gif': '🖼', '.svg': '🖼',
    '.py': '🐍', '.js': '🟨', '.html': '🌐', '.css': '🎨', '.json': '⚙️', '.yaml': '⚙️', '.yml': '⚙️',
    '.zip': '📦', '.gz': '📦', '.tar': '📦', '.rar': '📦', '.7z': '📦',
    '.mp3': '🎵', '.wav': '🎵', '.mp4': '🎥', '.mov': '🎥', '.avi': '🎥',
    '.csv': '📊', '.xls': '📊', '.xlsx': '📊', '.doc': '📝', '.docx': '📝',
}
FOLDER_ICON = '📁'


def get_file_icon(name):
    return FILE_ICON_MAP.get(os.path.splitext(name)[1].lower(), '📄')


def human_readable_size(size_bytes):
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0 or unit == 'TB':
            break
        size /= 1024.0
    return f"{size:.1f} {unit}"


def format_tree_item(item: TreeItem, detailed=False):
    """One line of `ls` output for a rendered node."""
    icon = f"{item.icon} " if platform.system() != 'Windows' else ''
    if item.collapsible is not CollapsibleState.NONE:
        return f"{icon}{item.label}/"
    if detailed and item.description:
        return f"{icon}{item.description:>9}  {item.label}"
    return f"{icon}{item.label}"
