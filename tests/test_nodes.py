"""Unit tests for scene-graph nodes.

Tests cover:
- Ray casting through group, transform and leaf nodes
- View-space hit points and normals (including non-uniform scale)
- Light collection with per-node transforms and duplicate lights
- Failed leaf intersections
- Node lookup, graph back-references and drawing
"""

import logging

import numpy as np
import pytest


def _down_z():
    from src.sgraph.core.ray import Ray

    return Ray(origin=[0.0, 0.0, 0.0], direction=[0.0, 0.0, -1.0])


class TestRayCast:
    """Tests for Node.ray_cast."""

    def test_leaf_under_transform(self, renderer):
        """Test a sphere moved down -z and scaled by 2."""
        from src.sgraph.core.transform import TransformStack, scale, translate
        from src.sgraph.scene.nodes import LeafNode, TransformNode

        node = TransformNode("ball", translate(0.0, 0.0, -5.0) @ scale(2.0, 2.0, 2.0), LeafNode("ball-mesh", "sphere"))
        hits = sorted(node.ray_cast(TransformStack(), _down_z(), renderer), key=lambda h: h.t)

        assert len(hits) == 2
        front = hits[0]
        assert abs(front.t - 3.0) < 1e-9
        assert np.allclose(front.intersection, [0.0, 0.0, -3.0, 1.0])
        assert np.allclose(front.normal, [0.0, 0.0, 1.0, 0.0])
        assert abs(hits[1].t - 7.0) < 1e-9
        assert front.node_name == "ball-mesh"

    def test_normal_under_non_uniform_scale(self, renderer):
        """Test that normals use the inverse transpose and stay unit length."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.core.transform import TransformStack, scale, translate
        from src.sgraph.scene.nodes import LeafNode, TransformNode

        # Ellipsoid x^2/4 + y^2 + z^2 = 1 centered at z = -5
        node = TransformNode("ellipsoid", translate(0.0, 0.0, -5.0) @ scale(2.0, 1.0, 1.0), LeafNode("e", "sphere"))
        target = np.array([np.sqrt(2.0), 0.0, -5.0 + np.sqrt(0.5)])
        hits = node.ray_cast(TransformStack(), Ray(origin=[0.0, 0.0, 0.0], direction=target), renderer)
        front = min(hits, key=lambda h: h.t)

        expected = np.array([np.sqrt(2.0) / 4.0, 0.0, np.sqrt(0.5)])
        expected /= np.linalg.norm(expected)
        assert abs(front.t - 1.0) < 1e-9
        assert np.allclose(front.normal[:3], expected)
        assert front.normal[3] == 0.0

    def test_stack_transform_applies(self, renderer):
        """Test that the caller's stack places the scene in view space."""
        from src.sgraph.core.transform import TransformStack, rotate, translate
        from src.sgraph.scene.nodes import LeafNode

        leaf = LeafNode("q", "quad")
        stack = TransformStack(translate(0.0, 0.0, -3.0) @ rotate(180.0, (0.0, 1.0, 0.0)))
        hits = leaf.ray_cast(stack, _down_z(), renderer)
        assert len(hits) == 1
        assert abs(hits[0].t - 3.0) < 1e-9
        assert np.allclose(hits[0].normal, [0.0, 0.0, -1.0, 0.0])

    def test_group_concatenates_in_child_order(self, renderer):
        """Test that a group returns every child's hits, in order."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode

        root = GroupNode("root")
        for name, z in (("a", -3.0), ("b", -1.0), ("c", -5.0)):
            root.add_child(TransformNode(name, translate(0.0, 0.0, z), LeafNode(name, "big-quad")))

        hits = root.ray_cast(TransformStack(), _down_z(), renderer)
        assert [h.node_name for h in hits] == ["a", "b", "c"]
        assert [round(h.t, 9) for h in hits] == [3.0, 1.0, 5.0]

    def test_empty_nodes_yield_nothing(self, renderer):
        """Test that empty groups and childless transforms have no hits."""
        from src.sgraph.core.transform import TransformStack
        from src.sgraph.scene.nodes import GroupNode, TransformNode

        assert GroupNode().ray_cast(TransformStack(), _down_z(), renderer) == []
        assert TransformNode().ray_cast(TransformStack(), _down_z(), renderer) == []

    def test_animation_transform_applies_after_transform(self, renderer):
        """Test that the animation transform moves the placed child."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.nodes import LeafNode, TransformNode

        node = TransformNode("moving", translate(0.0, 0.0, -2.0), LeafNode("m", "big-quad"))
        node.set_animation_transform(translate(0.0, 0.0, -1.0))
        hits = node.ray_cast(TransformStack(), _down_z(), renderer)
        assert abs(hits[0].t - 3.0) < 1e-9

    def test_leaf_resolves_texture(self, renderer):
        """Test that hits carry the leaf's material and texture."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.materials import Material
        from src.sgraph.scene.nodes import LeafNode

        material = Material(ambient=(0.1, 0.2, 0.3))
        leaf = LeafNode("q", "big-quad", material, "white")
        hit = leaf.ray_cast(TransformStack(translate(0.0, 0.0, -1.0)), _down_z(), renderer)[0]
        assert hit.material is material
        assert hit.texture is renderer.get_texture("white")

    def test_unknown_mesh_logs_and_yields_nothing(self, renderer, caplog):
        """Test that a failed intersection is logged and treated as a miss."""
        from src.sgraph.core.transform import TransformStack
        from src.sgraph.scene.nodes import LeafNode

        leaf = LeafNode("ghost", "no-such-mesh")
        with caplog.at_level(logging.WARNING, logger="src.sgraph.scene.nodes"):
            assert leaf.ray_cast(TransformStack(), _down_z(), renderer) == []
        assert "ghost" in caplog.text

    def test_texture_lookup_error_leaves_hit_untextured(self, renderer, caplog):
        """Test that a failed texture lookup keeps the hits and warns once."""
        from src.sgraph.core.errors import TextureSampleError
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.nodes import LeafNode

        def missing(name):
            raise TextureSampleError(f"no texture named {name!r}")

        renderer.get_texture = missing
        leaf = LeafNode("bare", "big-quad", texture_name="paint")
        stack = TransformStack(translate(0.0, 0.0, -1.0))
        with caplog.at_level(logging.DEBUG, logger="src.sgraph.scene.nodes"):
            first = leaf.ray_cast(stack, _down_z(), renderer)
            second = leaf.ray_cast(stack, _down_z(), renderer)

        assert len(first) == 1 and len(second) == 1
        assert first[0].texture is None
        levels = [r.levelno for r in caplog.records if r.name == "src.sgraph.scene.nodes"]
        assert levels == [logging.WARNING, logging.DEBUG]

    def test_degenerate_mesh_yields_nothing(self, renderer):
        """Test that a degenerate mesh does not break the traversal."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.geometry import Sphere
        from src.sgraph.scene.nodes import GroupNode, LeafNode

        renderer.add_mesh("flat", Sphere(radius=0.0))
        root = GroupNode("root", [LeafNode("bad", "flat"), LeafNode("good", "big-quad")])
        hits = root.ray_cast(TransformStack(translate(0.0, 0.0, -2.0)), _down_z(), renderer)
        assert [h.node_name for h in hits] == ["good"]


class TestGetLights:
    """Tests for Node.get_lights."""

    def test_lights_keyed_to_declaration_transform(self):
        """Test that each light maps to the transform where it is declared."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.light import Light
        from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode

        root_light = Light.point((0.0, 0.0, 0.0), name="root")
        moved_light = Light.point((0.0, 0.0, 0.0), name="moved")
        leaf_light = Light.point((0.0, 0.0, 0.0), name="leaf")

        leaf = LeafNode("leaf", "quad")
        leaf.add_light(leaf_light)
        moved = TransformNode("moved", translate(1.0, 2.0, 3.0), leaf)
        moved.add_light(moved_light)
        root = GroupNode("root", [moved])
        root.add_light(root_light)

        view = translate(0.0, 0.0, -10.0)
        lights = root.get_lights(TransformStack(view))

        assert list(lights) == [root_light, moved_light, leaf_light]
        assert np.allclose(lights[root_light], view)
        assert np.allclose(lights[moved_light], view @ translate(1.0, 2.0, 3.0))
        assert np.allclose(lights[leaf_light], view @ translate(1.0, 2.0, 3.0))

    def test_duplicate_light_first_discovered_wins(self):
        """Test that a light reachable twice keeps the first transform found."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.light import Light
        from src.sgraph.scene.nodes import GroupNode, TransformNode

        shared = Light.point((0.0, 0.0, 0.0))
        first = TransformNode("first", translate(1.0, 0.0, 0.0))
        second = TransformNode("second", translate(0.0, 5.0, 0.0))
        first.add_light(shared)
        second.add_light(shared)

        lights = GroupNode("root", [first, second]).get_lights(TransformStack())
        assert len(lights) == 1
        assert np.allclose(lights[shared], translate(1.0, 0.0, 0.0))

    def test_no_lights(self):
        """Test that a graph without lights yields an empty mapping."""
        from src.sgraph.core.transform import TransformStack
        from src.sgraph.scene.nodes import GroupNode, LeafNode

        assert GroupNode("root", [LeafNode("a", "quad")]).get_lights(TransformStack()) == {}


class TestStructure:
    """Tests for find, set_scenegraph, add_child and draw."""

    def test_find(self):
        """Test depth-first lookup by name."""
        from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode

        leaf = LeafNode("target", "quad")
        root = GroupNode("root", [TransformNode("t", child=GroupNode("g", [leaf]))])
        assert root.find("target") is leaf
        assert root.find("root") is root
        assert root.find("missing") is None

    def test_transform_node_single_child(self):
        """Test that a transform node rejects a second child."""
        from src.sgraph.scene.nodes import LeafNode, TransformNode

        node = TransformNode("t", child=LeafNode("a", "quad"))
        with pytest.raises(ValueError):
            node.add_child(LeafNode("b", "quad"))

    def test_set_scenegraph_reaches_every_node(self):
        """Test that the back-reference is installed on the whole subtree."""
        from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode
        from src.sgraph.scene.scenegraph import Scenegraph

        leaf = LeafNode("leaf", "quad")
        root = GroupNode("root", [TransformNode("t", child=leaf)])
        graph = Scenegraph()
        graph.make_scenegraph(root)
        assert root.scenegraph is graph
        assert leaf.scenegraph is graph

    def test_child_added_later_gets_scenegraph(self):
        """Test that children attached after installation see the graph."""
        from src.sgraph.scene.nodes import GroupNode, LeafNode
        from src.sgraph.scene.scenegraph import Scenegraph

        root = GroupNode("root")
        graph = Scenegraph()
        graph.make_scenegraph(root)
        late = LeafNode("late", "quad")
        root.add_child(late)
        assert late.scenegraph is graph

    def test_back_reference_does_not_keep_graph_alive(self):
        """Test that nodes hold the graph weakly."""
        import gc

        from src.sgraph.scene.nodes import GroupNode
        from src.sgraph.scene.scenegraph import Scenegraph

        root = GroupNode("root")
        graph = Scenegraph()
        graph.make_scenegraph(root)
        del graph
        gc.collect()
        assert root.scenegraph is None

    def test_draw_records_leaf_transforms(self, renderer):
        """Test that drawing visits leaves with their composed transforms."""
        from src.sgraph.core.transform import TransformStack, translate
        from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode

        root = GroupNode(
            "root",
            [
                TransformNode("t", translate(1.0, 0.0, 0.0), LeafNode("a", "quad", texture_name="white")),
                LeafNode("b", "sphere"),
            ],
        )
        renderer.draw(root, TransformStack())
        assert [c.mesh_name for c in renderer.draw_commands] == ["quad", "sphere"]
        assert np.allclose(renderer.draw_commands[0].transform, translate(1.0, 0.0, 0.0))
        assert np.allclose(renderer.draw_commands[1].transform, np.identity(4))
