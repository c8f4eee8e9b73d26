"""
Test the context policy resolver.
"""
import unittest
from ollama_ctx.core.policy import (
    ModelDescriptor, NamingMode, Rationale, RunOptions,
    resolve_action, resolve_context, destination_name, should_skip_existing
)

class TestResolveContext(unittest.TestCase):
    """
    Test the priority of --set-ctx, --max-ctx and the native size.
    """

    def test_specific_wins_over_cap(self):
        """Test that an explicit size beats the cap and the native size."""
        options = RunOptions(specific_context=4096, max_context=8192)
        self.assertEqual(resolve_context(32768, options), (4096, Rationale.SET_SPECIFIC))

    def test_specific_above_native(self):
        """Test an explicit size is used even when larger than native."""
        options = RunOptions(specific_context=65536)
        self.assertEqual(resolve_context(8192, options), (65536, Rationale.SET_SPECIFIC))

    def test_cap_applied(self):
        """Test the cap applies when native is larger."""
        options = RunOptions(max_context=65536)
        self.assertEqual(resolve_context(131072, options), (65536, Rationale.CAP_AT_MAX))

    def test_native_below_cap(self):
        """Test native is kept when below the cap."""
        options = RunOptions(max_context=16384)
        self.assertEqual(resolve_context(8192, options), (8192, Rationale.USE_NATIVE))

    def test_native_equal_to_cap(self):
        """Test native is kept when exactly equal to the cap."""
        options = RunOptions(max_context=8192)
        self.assertEqual(resolve_context(8192, options), (8192, Rationale.USE_NATIVE))

    def test_no_options(self):
        """Test native is used when nothing else is set."""
        self.assertEqual(resolve_context(131072, RunOptions()), (131072, Rationale.USE_NATIVE))

class TestDestinationName(unittest.TestCase):
    """
    Test destination naming.
    """

    def test_overwrite(self):
        self.assertEqual(destination_name("llama3.3:latest", 8192, RunOptions()), "llama3.3:latest")

    def test_auto(self):
        """Test auto naming replaces the tag with the size tag."""
        options = RunOptions(naming=NamingMode.AUTO)
        self.assertEqual(destination_name("llama3.3:latest", 131072, options), "llama3.3:128k_num_ctx")
        self.assertEqual(destination_name("qwen3", 5000, options), "qwen3:5000_num_ctx")
        self.assertEqual(destination_name("hf.co/org/model:Q4:x", 1048576, options), "hf.co/org/model:1m_num_ctx")

    def test_custom(self):
        options = RunOptions(naming=NamingMode.CUSTOM, output_name="my-llama:8k", target_model="llama3.3")
        self.assertEqual(destination_name("llama3.3:latest", 8192, options), "my-llama:8k")

class TestShouldSkipExisting(unittest.TestCase):
    """
    Test the already-configured skip rule.
    """

    def setUp(self):
        self.configured = ModelDescriptor("llama3.3:latest", 131072, 8192)
        self.unconfigured = ModelDescriptor("llama3.3:latest", 131072, None)

    def test_skip_when_configured(self):
        self.assertTrue(should_skip_existing(self.configured, RunOptions()))

    def test_force_overrides(self):
        self.assertFalse(should_skip_existing(self.configured, RunOptions(force_update=True)))

    def test_unconfigured(self):
        self.assertFalse(should_skip_existing(self.unconfigured, RunOptions()))

    def test_new_model_modes_never_skip(self):
        """Test auto and custom naming ignore an existing num_ctx."""
        self.assertFalse(should_skip_existing(self.configured, RunOptions(naming=NamingMode.AUTO)))
        options = RunOptions(naming=NamingMode.CUSTOM, output_name="x", target_model="llama3.3:latest")
        self.assertFalse(should_skip_existing(self.configured, options))

class TestResolveAction(unittest.TestCase):
    """
    Test the combined resolution.
    """

    def test_auto_named_cap(self):
        descriptor = ModelDescriptor("llama3.3:latest", 131072)
        action = resolve_action(descriptor, RunOptions(max_context=32768, naming=NamingMode.AUTO))
        self.assertEqual(action.final_context, 32768)
        self.assertEqual(action.destination, "llama3.3:32k_num_ctx")
        self.assertEqual(action.rationale, Rationale.CAP_AT_MAX)
        self.assertIn("Capping at 32768", action.describe())

    def test_missing_native(self):
        """Test resolution refuses models without a native length."""
        with self.assertRaises(ValueError):
            resolve_action(ModelDescriptor("broken:latest"), RunOptions())
        with self.assertRaises(ValueError):
            resolve_action(ModelDescriptor("broken:latest", 0), RunOptions())

if __name__ == "__main__":
    unittest.main()
