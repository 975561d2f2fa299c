# file: onnx2graph/importer/__init__.py
"""ONNX -> target graph importer: graph walking, node views and op converters."""
