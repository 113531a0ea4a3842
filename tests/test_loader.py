import unittest

import numpy as np

from exrgba.loader import ExrLoader

from exr_fakes import FakeCodec, make_part, rgb_part


class TestExrLoader(unittest.TestCase):
    def test_multipart_lookup(self) -> None:
        loader = ExrLoader(b"", codec=FakeCodec([rgb_part("left"), rgb_part("right", alpha=[0.2, 0.8])]))

        self.assertTrue(loader.ok)
        self.assertEqual(loader.error, "")
        self.assertTrue(loader.multipart)
        self.assertEqual(loader.part_names(), ["left", "right"])
        self.assertEqual((loader.width("right"), loader.height("right")), (2, 1))
        np.testing.assert_array_equal(
            loader.get_bytes("right"),
            np.array([1.0, 0.0, 0.0, 0.2, 0.5, 0.5, 0.5, 0.8], dtype=np.float32),
        )

    def test_unknown_part(self) -> None:
        loader = ExrLoader(b"", codec=FakeCodec([rgb_part("left")]))
        self.assertEqual(loader.width("nope"), -1)
        self.assertEqual(loader.height("nope"), -1)
        self.assertIsNone(loader.get_bytes("nope"))
        self.assertIsNone(loader.image("nope"))
        self.assertEqual(loader.layers("nope"), [])

    def test_single_part_defaults(self) -> None:
        loader = ExrLoader(b"", codec=FakeCodec([rgb_part()]))
        self.assertFalse(loader.multipart)
        self.assertEqual(loader.get_bytes().size, 8)
        self.assertEqual(loader.width(), 2)

    def test_container_error_is_reported_not_raised(self) -> None:
        loader = ExrLoader(b"", codec=FakeCodec([rgb_part()], parse_error="Invalid data window"))
        self.assertFalse(loader.ok)
        self.assertEqual(loader.error, "Invalid data window")
        self.assertEqual(loader.kind, "ContainerError")
        self.assertEqual(loader.part_names(), [])

    def test_part_failure_keeps_other_parts(self) -> None:
        no_blue = make_part("matte", 1, 1, [("G", [0]), ("R", [1])])
        loader = ExrLoader(b"", codec=FakeCodec([no_blue, rgb_part("beauty")]))
        self.assertFalse(loader.ok)
        self.assertEqual(loader.kind, "MissingColorChannel")
        self.assertIn("B channel not found", loader.error)
        self.assertEqual(list(loader.failures()), ["matte"])
        self.assertEqual(loader.part_names(), ["matte", "beauty"])
        self.assertEqual(loader.width("beauty"), 2)
        self.assertEqual(loader.width("matte"), -1)

    def test_layer_option(self) -> None:
        part = make_part("", 1, 1, [("fg.A", [0.5]), ("fg.B", [3]), ("fg.G", [2]), ("fg.R", [1])])
        loader = ExrLoader(b"", codec=FakeCodec([part]), layer="fg")
        self.assertTrue(loader.ok)
        self.assertEqual(loader.layers(), ["fg"])
        np.testing.assert_array_equal(loader.get_bytes(), np.array([1, 2, 3, 0.5], dtype=np.float32))


if __name__ == "__main__":
    unittest.main()
