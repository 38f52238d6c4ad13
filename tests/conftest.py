# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for tree view tests."""

import pytest

from genro_treeview import TreeStore


def make_tree():
    """Four roots: two nested branches, a leaf and an empty branch."""
    return [
        {'id': 'docs', 'name': 'Docs', 'children': [
            {'id': 'readme', 'name': 'README'},
            {'id': 'guide', 'name': 'Guide', 'children': [
                {'id': 'intro', 'name': 'Intro'},
                {'id': 'usage', 'name': 'Usage'},
            ]},
        ]},
        {'id': 'src', 'name': 'Src', 'children': [
            {'id': 'main', 'name': 'main.py'},
        ]},
        {'id': 'notes', 'name': 'Notes'},
        {'id': 'empty', 'name': 'Empty', 'children': []},
    ]


ALL_IDS = {'docs', 'readme', 'guide', 'intro', 'usage', 'src', 'main', 'notes', 'empty'}


@pytest.fixture
def store():
    return TreeStore(make_tree())


@pytest.fixture
def events(store):
    """List receiving every state pushed by the store after subscription."""
    received = []
    store.subscribe(received.append)
    received.clear()
    return received


def visible_ids(store):
    return [row.id for row in store.get_visible_nodes()]
