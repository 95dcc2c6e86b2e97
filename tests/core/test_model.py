import unittest

from raiz.core.model import DependencyNode, NodeStatus, PackageMetadata


class TestPackageMetadata(unittest.TestCase):

    def test_from_registry_document(self):
        meta = PackageMetadata.from_json({
            "name": "express",
            "description": "Fast, unopinionated, minimalist web framework",
            "dist-tags": {"latest": "4.18.2", "next": "5.0.0-beta.1"},
            "versions": {
                "4.18.2": {
                    "version": "4.18.2",
                    "dependencies": {"accepts": "~1.3.8"},
                    "devDependencies": {"mocha": "10.2.0"},
                    "peerDependencies": None,
                },
            },
            "time": {"4.18.2": "2022-10-08T20:15:23.000Z"},
            "license": "MIT",
            "keywords": ["web", "router"],
        })

        self.assertEqual(meta.latest, "4.18.2")
        details = meta.versions["4.18.2"]
        self.assertEqual(details.dependencies, {"accepts": "~1.3.8"})
        self.assertEqual(details.dev_dependencies, {"mocha": "10.2.0"})
        self.assertEqual(details.peer_dependencies, {})
        self.assertEqual(meta.time["4.18.2"], "2022-10-08T20:15:23.000Z")
        self.assertEqual(meta.keywords, ["web", "router"])

    def test_tolerates_missing_and_malformed_fields(self):
        meta = PackageMetadata.from_json({"name": "odd", "versions": [], "keywords": "a,b", "homepage": {}})

        self.assertEqual(meta.versions, {})
        self.assertEqual(meta.keywords, [])
        self.assertEqual(meta.homepage, "")
        self.assertEqual(meta.latest, "")


class TestDependencyNode(unittest.TestCase):

    def test_each_constructor_sets_one_status(self):
        self.assertIs(DependencyNode.expanded("a", "^1", "1.2.0").status, NodeStatus.EXPANDED)
        self.assertTrue(DependencyNode.circular("a", "^1").is_circular)
        self.assertTrue(DependencyNode.depth_limited("a", "^1").is_depth_limited)

        failed = DependencyNode.failed("a", "^1", "boom")
        self.assertTrue(failed.has_error)
        self.assertFalse(failed.is_circular)
        self.assertFalse(failed.is_depth_limited)
        self.assertEqual(failed.version, "")

    def test_to_dict(self):
        root = DependencyNode.expanded("a", "^1.0.0", "1.4.0")
        root.dependencies["b"] = DependencyNode.circular("b", "~2.0.0")
        root.dependencies["c"] = DependencyNode.depth_limited("c", "*")
        root.dependencies["d"] = DependencyNode.failed("d", "1.x", "package 'd' not found in npm registry")

        self.assertEqual(root.to_dict(), {
            "version_range": "^1.0.0",
            "version": "1.4.0",
            "dependencies": {
                "b": {"version_range": "~2.0.0", "version": "", "circular": True},
                "c": {"version_range": "*", "version": "", "depth_limited": True},
                "d": {"version_range": "1.x", "version": "", "error": "package 'd' not found in npm registry"},
            },
        })
