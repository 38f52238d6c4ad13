# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeStore state operations."""

import logging

import pytest

from genro_treeview import (
    CycleError,
    DragState,
    DuplicateNodeIdError,
    NodeNotFoundError,
    TreeNode,
    TreeStore,
    TreeState,
    create_tree_store,
)
from genro_treeview.traversal import collect_ids

from conftest import ALL_IDS, make_tree, visible_ids


def assert_integrity(store):
    """Ids are unique and every referenced id exists."""
    ids = collect_ids(store.nodes)
    assert len(ids) == len(set(ids))
    assert store.state.referenced_ids() <= set(ids)


class TestCreation:
    """Tests for store construction."""

    def test_create_empty(self):
        store = create_tree_store()
        assert store.nodes == []
        assert len(store) == 0
        assert store.state == TreeState()

    def test_initial_state_is_empty(self, store):
        """Test auxiliary fields start empty."""
        state = store.state
        assert state.expanded_ids == frozenset()
        assert state.selected_ids == frozenset()
        assert state.focused_id is None
        assert state.editing_id is None
        assert state.drag_state == DragState(False, None, None)
        assert len(store) == 9

    def test_initial_nodes_are_copied(self):
        """Test the store owns its hierarchy."""
        root = TreeNode('a', 'A', children=[])
        store = TreeStore([root])
        root.children.append(TreeNode('b', 'B'))
        assert store.find_node('a').children == []

    def test_duplicate_ids_rejected(self):
        with pytest.raises(DuplicateNodeIdError):
            TreeStore([{'id': 'a', 'name': 'A'}, {'id': 'a', 'name': 'B'}])

    def test_contains_and_repr(self, store):
        assert 'usage' in store
        assert 'nope' not in store
        assert repr(store) == "TreeStore(['docs', 'src', 'notes', 'empty'])"


class TestExpansion:
    """Tests for expand, collapse and their variants."""

    def test_scenario_expand_then_flatten(self):
        """Test root with one child shows two rows after expansion."""
        store = TreeStore([{'id': '1', 'name': 'root', 'children': [{'id': '2', 'name': 'child'}]}])
        store.expand('1')
        rows = store.get_visible_nodes()
        assert [(row.id, row.depth) for row in rows] == [('1', 0), ('2', 1)]

    def test_toggle(self, store):
        store.toggle_expand('docs')
        assert 'docs' in store.state.expanded_ids
        store.toggle_expand('docs')
        assert 'docs' not in store.state.expanded_ids

    def test_childless_nodes_never_expand(self, store, events):
        """Test leaves and empty branches are not registered."""
        for node_id in ('notes', 'empty'):
            store.toggle_expand(node_id)
            store.expand(node_id)
        assert store.state.expanded_ids == frozenset()
        assert events == []

    def test_expand_unknown_is_noop(self, store, events):
        before = store.state
        assert store.expand('nope') is before
        assert events == []

    def test_collapse_is_idempotent(self, store, events):
        store.expand('docs')
        store.collapse('docs')
        once = store.state.expanded_ids
        store.collapse('docs')
        assert store.state.expanded_ids == once
        assert len(events) == 2

    def test_collapse_removes_exactly_the_subtree_rows(self, store):
        store.expand_all()
        before = visible_ids(store)
        store.collapse('guide')
        after = visible_ids(store)
        assert set(before) - set(after) == {'intro', 'usage'}

    def test_expand_all(self, store):
        store.expand('src')
        store.expand_all()
        assert store.state.expanded_ids == {'docs', 'guide', 'src'}
        assert len(store.get_visible_nodes()) == 9

    def test_expand_all_max_depth(self, store):
        """Test only nodes above max_depth are expanded."""
        store.expand('guide')
        store.expand_all(max_depth=1)
        assert store.state.expanded_ids == {'docs', 'src'}
        store.expand_all(max_depth=0)
        assert store.state.expanded_ids == frozenset()

    def test_collapse_all(self, store):
        store.expand_all()
        store.collapse_all()
        assert visible_ids(store) == ['docs', 'src', 'notes', 'empty']


class TestSelection:
    """Tests for selection and focus."""

    def test_single_select_replaces(self, store):
        store.select_node('docs')
        store.select_node('src')
        assert store.state.selected_ids == {'src'}
        assert store.state.focused_id == 'src'

    def test_multi_select_toggles(self, store):
        store.select_node('docs')
        store.select_node('src', multi=True)
        assert store.state.selected_ids == {'docs', 'src'}
        store.select_node('docs', multi=True)
        assert store.state.selected_ids == {'src'}
        assert store.state.focused_id == 'docs'

    def test_select_unknown_is_noop(self, store, events):
        store.select_node('nope')
        assert store.state.selected_ids == frozenset()
        assert events == []

    def test_select_range_is_order_independent(self, store):
        store.expand('docs')
        forward = store.select_range('readme', 'src').selected_ids
        store.clear_selection()
        backward = store.select_range('src', 'readme').selected_ids
        assert forward == backward == {'readme', 'guide', 'src'}

    def test_select_range_extends_selection(self, store):
        store.select_node('notes')
        store.select_range('docs', 'src')
        assert store.state.selected_ids == {'notes', 'docs', 'src'}

    def test_select_range_hidden_node_is_noop(self, store, events):
        """Test a node under a collapsed ancestor cannot anchor a range."""
        store.select_range('docs', 'intro')
        assert store.state.selected_ids == frozenset()
        assert events == []

    def test_select_all_and_clear(self, store):
        store.select_all()
        assert store.state.selected_ids == ALL_IDS
        store.clear_selection()
        assert store.state.selected_ids == frozenset()

    def test_set_focus(self, store):
        store.set_focus('usage')
        assert store.state.focused_id == 'usage'
        store.set_focus('nope')
        assert store.state.focused_id == 'usage'
        store.set_focus(None)
        assert store.state.focused_id is None


class TestEditing:
    """Tests for inline editing and rename."""

    def test_start_and_stop(self, store):
        store.start_editing('readme')
        assert store.state.editing_id == 'readme'
        store.stop_editing()
        assert store.state.editing_id is None

    def test_not_editable_node(self):
        store = TreeStore([{'id': 'a', 'name': 'A', 'editable': False}])
        store.start_editing('a')
        assert store.state.editing_id is None

    def test_rename(self, store):
        calls = []
        store.start_editing('intro')
        store.rename_node('intro', 'Introduction', lambda *args: calls.append(args))
        assert store.find_node('intro').name == 'Introduction'
        assert store.state.editing_id is None
        assert calls == [('intro', 'Introduction', 'Intro')]

    def test_rename_keeps_old_snapshot(self, store):
        """Test earlier snapshots are never changed retroactively."""
        old = store.state
        store.rename_node('intro', 'Introduction')
        assert old.nodes[0].children[1].children[0].name == 'Intro'

    def test_rename_callback_runs_before_notification(self, store):
        order = []
        store.subscribe(lambda state: order.append('notify'))
        order.clear()
        store.rename_node('notes', 'Memo', lambda *args: order.append('callback'))
        assert order == ['callback', 'notify']

    def test_rename_unknown_clears_editing(self, store):
        calls = []
        store.start_editing('notes')
        store.rename_node('nope', 'x', lambda *args: calls.append(args))
        assert store.state.editing_id is None
        assert calls == []


class TestCreate:
    """Tests for create_node."""

    def test_create_root(self, store):
        store.create_node(None, {'id': 'new', 'name': 'New'})
        assert [n.id for n in store.nodes][-1] == 'new'
        assert store.state.expanded_ids == frozenset()

    def test_create_under_leaf_turns_it_into_branch(self, store):
        store.create_node('notes', TreeNode('todo', 'Todo'))
        notes = store.find_node('notes')
        assert [c.id for c in notes.children] == ['todo']
        assert 'notes' in store.state.expanded_ids
        assert 'todo' in visible_ids(store)

    def test_create_appends_to_children(self, store):
        store.create_node('guide', {'id': 'faq', 'name': 'FAQ'})
        assert [c.id for c in store.find_node('guide').children] == ['intro', 'usage', 'faq']

    def test_create_under_unknown_parent_is_noop(self, store, events):
        store.create_node('nope', {'id': 'new', 'name': 'New'})
        assert 'new' not in store
        assert events == []

    def test_create_duplicate_id_is_noop(self, store, events):
        store.create_node(None, {'id': 'x', 'name': 'X', 'children': [{'id': 'main', 'name': 'dup'}]})
        assert 'x' not in store
        assert events == []
        assert_integrity(store)

    def test_created_node_is_copied(self, store):
        node = TreeNode('new', 'New')
        store.create_node(None, node)
        node.name = 'changed'
        assert store.find_node('new').name == 'New'


class TestDelete:
    """Tests for delete_node."""

    def test_delete_purges_subtree_references(self, store):
        """Test expanded and selected ids of the subtree are dropped."""
        store.expand('docs')
        store.expand('guide')
        store.select_node('docs')
        store.select_node('intro', multi=True)
        store.select_node('src', multi=True)
        store.delete_node('docs')
        assert 'docs' not in store
        assert 'intro' not in store
        assert store.state.expanded_ids == frozenset()
        assert store.state.selected_ids == {'src'}
        assert_integrity(store)

    def test_delete_clears_focus_editing_and_drag(self, store):
        store.set_focus('usage')
        store.start_editing('intro')
        store.start_drag('guide')
        store.delete_node('docs')
        assert store.state.focused_id is None
        assert store.state.editing_id is None
        assert store.state.drag_state == DragState()

    def test_delete_target_keeps_drag_session(self, store):
        store.start_drag('notes')
        store.set_drag_target('main')
        store.delete_node('src')
        assert store.state.drag_state == DragState(True, 'notes', None)

    def test_delete_twice_is_noop(self, store, events):
        store.delete_node('guide')
        after = store.state
        store.delete_node('guide')
        assert store.state is after
        assert len(events) == 1

    def test_delete_keeps_unrelated_focus(self, store):
        store.set_focus('main')
        store.delete_node('docs')
        assert store.state.focused_id == 'main'


class TestMove:
    """Tests for move_node."""

    def test_move_into_branch(self, store):
        store.move_node('notes', 'src')
        assert [c.id for c in store.find_node('src').children] == ['main', 'notes']
        assert 'src' in store.state.expanded_ids
        assert [n.id for n in store.nodes] == ['docs', 'src', 'empty']
        assert_integrity(store)

    def test_move_into_empty_branch(self, store):
        store.move_node('guide', 'empty')
        empty = store.find_node('empty')
        assert [c.id for c in empty.children] == ['guide']
        assert [c.id for c in empty.children[0].children] == ['intro', 'usage']
        assert 'empty' in store.state.expanded_ids
        assert_integrity(store)

    def test_leaf_target_redirects_to_parent(self, store):
        store.move_node('notes', 'intro')
        assert [c.id for c in store.find_node('guide').children] == ['intro', 'usage', 'notes']
        assert 'guide' in store.state.expanded_ids

    def test_root_leaf_target_moves_to_root_level(self):
        """Test dropping on a root-level leaf never nests."""
        store = TreeStore([{'id': 'a', 'name': 'A'}, {'id': 'b', 'name': 'B'}])
        store.move_node('a', 'b')
        assert [n.id for n in store.nodes] == ['b', 'a']
        assert all(n.children is None for n in store.nodes)
        assert store.state.expanded_ids == frozenset()

    def test_nested_node_to_root_level(self, store):
        store.move_node('intro', 'notes')
        assert [n.id for n in store.nodes] == ['docs', 'src', 'notes', 'empty', 'intro']
        assert [c.id for c in store.find_node('guide').children] == ['usage']

    def test_cycle_guard(self):
        """Test a node cannot be dropped into its own subtree."""
        store = TreeStore([{'id': '1', 'name': 'root', 'children': [{'id': '2', 'name': 'child'}]}])
        before = store.state
        store.move_node('1', '2')
        assert store.state is before
        assert store.find_parent_node('2') == (True, store.find_node('1'))

    def test_move_into_deeper_descendant_is_noop(self, store, events):
        store.move_node('docs', 'usage')
        store.move_node('docs', 'guide')
        store.move_node('docs', 'docs')
        assert events == []

    def test_move_unknown_is_noop(self, store, events):
        store.move_node('nope', 'docs')
        store.move_node('docs', 'nope')
        assert events == []

    def test_move_keeps_old_snapshot(self, store):
        old = store.state
        store.move_node('readme', 'src')
        assert [c.id for c in old.nodes[0].children] == ['readme', 'guide']

    def test_repeated_moves_keep_ids_unique(self, store):
        for source, target in [
            ('readme', 'src'), ('guide', 'empty'), ('src', 'intro'),
            ('docs', 'main'), ('notes', 'usage'), ('empty', 'notes'),
        ]:
            store.move_node(source, target)
            assert_integrity(store)
        assert set(collect_ids(store.nodes)) == ALL_IDS


class TestDrag:
    """Tests for the drag session."""

    def test_drag_lifecycle(self, store):
        store.start_drag('notes')
        assert store.state.drag_state == DragState(True, 'notes', None)
        store.set_drag_target('src')
        assert store.state.drag_state.target_id == 'src'
        store.set_drag_target(None)
        assert store.state.drag_state.target_id is None
        store.end_drag()
        assert store.state.drag_state == DragState()

    def test_drag_does_not_move(self, store):
        before = store.nodes
        store.start_drag('notes')
        store.set_drag_target('src')
        store.end_drag()
        assert store.nodes is before

    def test_drag_unknown_ids_ignored(self, store):
        store.start_drag('nope')
        assert store.state.drag_state.is_dragging is False
        store.start_drag('notes')
        store.set_drag_target('nope')
        assert store.state.drag_state.target_id is None


class TestSetNodes:
    """Tests for set_nodes and raw state access."""

    def test_set_nodes_keeps_auxiliary_state(self, store):
        """Test stale ids are not reconciled."""
        store.expand('docs')
        store.select_node('readme')
        store.set_nodes([{'id': 'other', 'name': 'Other'}])
        assert [n.id for n in store.nodes] == ['other']
        assert store.state.expanded_ids == {'docs'}
        assert store.state.selected_ids == {'readme'}
        assert store.state.focused_id == 'readme'

    def test_update(self, store):
        store.update(lambda state: state.evolve(focused_id='src'))
        assert store.state.focused_id == 'src'

    def test_set_state(self, store, events):
        new_state = TreeState.initial()
        store.set_state(new_state)
        assert store.state is new_state
        assert events == [new_state]


class TestRaiseOnError:
    """Tests for raise_on_error mode."""

    def setup_method(self):
        self.store = TreeStore(make_tree(), raise_on_error=True)

    def test_unknown_id_raises(self):
        with pytest.raises(NodeNotFoundError, match="'nope' not found"):
            self.store.select_node('nope')
        with pytest.raises(KeyError):
            self.store.delete_node('nope')

    def test_cycle_raises(self):
        with pytest.raises(CycleError):
            self.store.move_node('docs', 'intro')

    def test_duplicate_raises(self):
        with pytest.raises(DuplicateNodeIdError):
            self.store.create_node(None, {'id': 'docs', 'name': 'again'})

    def test_childless_expand_still_silent(self):
        assert self.store.expand('notes') is self.store.state

    def test_state_unchanged_after_raise(self):
        before = self.store.state
        with pytest.raises(CycleError):
            self.store.move_node('docs', 'docs')
        assert self.store.state is before

    def test_get_node_always_raises(self, store):
        with pytest.raises(NodeNotFoundError):
            store.get_node('nope')


class TestLogging:
    """Tests for guard logging."""

    def test_skipped_operation_is_logged(self, store, caplog):
        with caplog.at_level(logging.DEBUG, logger='genro_treeview'):
            store.delete_node('nope')
        assert "delete_node skipped: Node 'nope' not found" in caplog.text

    def test_custom_logger(self, caplog):
        store = TreeStore(make_tree(), logger=logging.getLogger('widgets.tree'))
        with caplog.at_level(logging.DEBUG, logger='widgets.tree'):
            store.move_node('docs', 'guide')
        assert any(r.name == 'widgets.tree' for r in caplog.records)
