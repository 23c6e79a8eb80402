import numpy as np

from app.domain.movement import MovementAggregator
from app.utils.keypoint_converter import KeypointConverter
from tests.test_helpers import create_linear_motion_frames


def _history():
    agg = MovementAggregator(tracked_landmarks=["left_knee", "right_knee"])
    for frame in create_linear_motion_frames(4, names=["left_knee", "right_knee"]):
        agg.ingest(frame)
    return agg.history


def test_keypoint_json_roundtrip():
    history = _history()
    json_str = KeypointConverter(history).to_json_string()

    restored = KeypointConverter.from_json_string(json_str)
    assert restored.to_history() == history
    assert np.allclose(restored.to_numpy(), KeypointConverter(history).to_numpy())


def test_to_numpy_shape():
    arr = KeypointConverter(_history()).to_numpy()
    assert arr.shape == (4, 2, 2)
    # 마지막 프레임 left_knee = (9, 12)
    assert arr[3, 0].tolist() == [9.0, 12.0]


def test_empty_history():
    converter = KeypointConverter([])
    assert converter.to_numpy().shape == (0, 0, 2)
    assert converter.to_json_string() == "[]"
