# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Keyboard-driven file browser state, printed as an indented listing.

Run with: python examples/file_browser/file_browser.py
"""

from __future__ import annotations

from genro_treeview import FlatTreeNode, create_tree_store

PROJECT = [
    {'id': 'src', 'name': 'src', 'icon_collapsed': 'folder', 'children': [
        {'id': 'app', 'name': 'app.py'},
        {'id': 'models', 'name': 'models', 'children': [
            {'id': 'user', 'name': 'user.py'},
            {'id': 'order', 'name': 'order.py'},
        ]},
    ]},
    {'id': 'tests', 'name': 'tests', 'children': []},
    {'id': 'readme', 'name': 'README.md', 'editable': False},
]


def render(rows: list[FlatTreeNode], focused: str | None) -> None:
    for row in rows:
        cursor = '>' if row.id == focused else ' '
        marker = '/' if row.node.is_branch else ''
        print(f"{cursor} {'  ' * row.depth}{row.node.name}{marker}")
    print()


def main() -> None:
    store = create_tree_store(PROJECT)
    store.visible_nodes.subscribe(lambda rows: render(rows, store.state.focused_id))

    store.expand_all()
    store.set_focus(store.find_by_letter('o'))
    store.move_node('order', 'tests')
    store.rename_node(
        'app', 'main.py',
        on_rename=lambda node_id, new, old: print(f"renamed {old} -> {new}\n"),
    )
    store.delete_node('models')


if __name__ == '__main__':
    main()
