"""
AlertMap Navigation Tests

Tests cover: drill-down, breadcrumbs, home, leaf clicks and remapping the
breadcrumb path onto a rebuilt tree.
"""

import pytest


@pytest.fixture
def tree(alert_factory):
    """tag -> type tree: db(grafana x2, gcp x1), web(grafana x1)."""
    from alertmap.grouping.engine import group_alerts

    alerts = [
        alert_factory(tag="db", type="Grafana"),
        alert_factory(tag="db", type="GCP"),
        alert_factory(tag="web", type="Grafana"),
        alert_factory(tag="db", type="Grafana"),
    ]
    return group_alerts(alerts, ["tag", "type"])


class TestNavigationController:
    """Test breadcrumb navigation."""

    def test_initial_state_is_root(self, tree):
        """Test a new controller shows the top-level groups."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)

        assert nav.is_root
        assert nav.state == ()
        assert nav.visible_nodes == tree

    def test_click_group_drills_down(self, tree):
        """Test clicking a group pushes a breadcrumb."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        db = tree[0]

        assert nav.click_group(db)

        assert not nav.is_root
        assert [c.label for c in nav.breadcrumbs] == ["db"]
        assert nav.breadcrumbs[0].node is db
        assert nav.visible_nodes == db.children

    def test_multi_level_drill_and_breadcrumb(self, tree):
        """Test breadcrumb clicks truncate the stack inclusively."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        db = tree[0]
        grafana = db.children[0]

        nav.click_group(db)
        nav.click_group(grafana)
        assert [c.label for c in nav.breadcrumbs] == ["db", "grafana"]
        assert len(nav.visible_nodes) == 2

        assert nav.click_breadcrumb(0)

        assert [c.label for c in nav.breadcrumbs] == ["db"]
        assert nav.visible_nodes == db.children

    def test_bad_breadcrumb_index(self, tree):
        """Test out-of-range breadcrumb clicks are ignored."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        nav.click_group(tree[0])

        assert not nav.click_breadcrumb(1)
        assert not nav.click_breadcrumb(-1)
        assert len(nav.breadcrumbs) == 1

    def test_click_home_round_trip(self, tree):
        """Test home returns the same sibling list as the initial root."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        initial = nav.visible_nodes

        nav.click_group(tree[0])
        nav.click_group(tree[0].children[0])
        nav.click_home()

        assert nav.is_root
        assert nav.visible_nodes == initial
        assert [id(n) for n in nav.visible_nodes] == [id(n) for n in initial]

    def test_click_leaf_opens_alert(self, tree):
        """Test leaf clicks call the open callback without navigating."""
        from alertmap.navigation import NavigationController

        opened = []
        nav = NavigationController(tree, on_alert_open=opened.append)
        nav.click_group(tree[1])
        leaf = tree[1].children[0].children[0]

        nav.click(leaf)

        assert opened == [leaf.alert]
        assert [c.label for c in nav.breadcrumbs] == ["web"]

    def test_click_group_on_leaf_ignored(self, tree):
        """Test leaves and empty groups cannot be drilled into."""
        from alertmap.navigation import NavigationController
        from alertmap.types import Group

        nav = NavigationController(tree)
        leaf = tree[0].children[0].children[0]

        assert not nav.click_group(leaf)
        assert not nav.click_group(Group(key="tag", value="empty"))
        assert nav.is_root

    def test_click_overflow(self, tree):
        """Test overflow tiles open their hidden alerts without navigating."""
        from alertmap.navigation import NavigationController
        from alertmap.treemap.tiles import OverflowTile

        hidden = [leaf.alert for leaf in tree[0].children[0].children]
        opened = []
        batches = []
        nav = NavigationController(tree, on_alert_open=opened.append, on_overflow_open=batches.append)

        nav.click(OverflowTile(alerts=hidden))

        assert batches == [hidden]
        assert opened == []
        assert nav.is_root

    def test_click_overflow_without_handler(self, tree):
        """Test an overflow click with no handler is a no-op."""
        from alertmap.navigation import NavigationController
        from alertmap.treemap.tiles import OverflowTile

        opened = []
        nav = NavigationController(tree, on_alert_open=opened.append)

        nav.click(OverflowTile(alerts=[]))

        assert nav.is_root
        assert opened == []

    def test_reset_with_new_tree(self, tree):
        """Test reset drops the path and swaps the tree."""
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        nav.click_group(tree[0])

        nav.reset(tree[1:])

        assert nav.is_root
        assert nav.visible_nodes == tree[1:]

    def test_refresh_keeps_existing_path(self, tree, alert_factory):
        """Test a rebuilt tree keeps the drill-down by (key, value)."""
        from alertmap.grouping.engine import group_alerts
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        nav.click_group(tree[0])
        nav.click_group(tree[0].children[0])

        rebuilt = group_alerts(
            [
                alert_factory(tag="web", type="Grafana"),
                alert_factory(tag="db", type="Grafana"),
                alert_factory(tag="db", type="Grafana"),
                alert_factory(tag="db", type="Grafana"),
            ],
            ["tag", "type"],
        )

        assert nav.refresh(rebuilt)

        assert nav.path == [("tag", "db"), ("type", "grafana")]
        assert nav.breadcrumbs[0].node is rebuilt[1]
        assert len(nav.visible_nodes) == 3

    def test_refresh_resets_vanished_path(self, tree, alert_factory):
        """Test navigation resets when the drilled group disappears."""
        from alertmap.grouping.engine import group_alerts
        from alertmap.navigation import NavigationController

        nav = NavigationController(tree)
        nav.click_group(tree[0])
        nav.click_group(tree[0].children[1])  # db / gcp

        rebuilt = group_alerts([alert_factory(tag="db", type="Grafana")], ["tag", "type"])

        assert not nav.refresh(rebuilt)

        assert nav.is_root
        assert nav.visible_nodes == rebuilt

    def test_refresh_at_root(self, tree):
        """Test refreshing at the root just swaps the tree."""
        from alertmap.navigation import NavigationController

        nav = NavigationController([])

        assert nav.refresh(tree)
        assert nav.visible_nodes == tree
