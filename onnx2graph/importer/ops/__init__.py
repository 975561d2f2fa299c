# file: onnx2graph/importer/ops/__init__.py
