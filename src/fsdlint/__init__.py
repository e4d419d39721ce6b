"""fsdlint - architectural conformance analyzer for Feature-Sliced front-end codebases."""

__version__ = "0.1.0"
