import onnx2graph.core as core


def test_every_exported_name_resolves():
    missing = [name for name in core.__all__ if not hasattr(core, name)]
    assert missing == []
    assert len(set(core.__all__)) == len(core.__all__)
