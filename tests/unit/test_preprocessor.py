import cv2
import numpy as np
import pytest

from app.domain.video.preprocessor import VideoPreprocessor
from app.schemas.video_dto import VideoPreprocessRequest


@pytest.fixture
def tiny_video(tmp_path):
    """20프레임, 10fps (2초) 테스트 영상. 왼쪽 절반만 흰색."""
    path = tmp_path / "tiny.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("MJPG writer not available in this OpenCV build")
    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    frame[:, :32] = 255
    for _ in range(20):
        writer.write(frame)
    writer.release()
    return path


def test_read_all_frames(tiny_video):
    frames, meta = VideoPreprocessor().process(VideoPreprocessRequest(file_path=str(tiny_video)))

    assert len(frames) == meta.total_frames == 20
    assert meta.fps == pytest.approx(10.0)
    assert meta.duration == pytest.approx(2.0)
    assert (meta.width, meta.height) == (64, 48)


def test_downsample_keeps_duration(tiny_video):
    frames, meta = VideoPreprocessor().process(
        VideoPreprocessRequest(file_path=str(tiny_video), target_fps=5)
    )

    assert len(frames) == 10
    assert meta.fps == pytest.approx(5.0)
    assert meta.duration == pytest.approx(2.0)


def test_mirror_flips_horizontally(tiny_video):
    frames, _ = VideoPreprocessor().process(
        VideoPreprocessRequest(file_path=str(tiny_video), mirror=True)
    )
    # 반전 후에는 오른쪽이 밝다
    assert frames[0][:, 48:].mean() > frames[0][:, :16].mean()


def test_missing_video_raises(tmp_path):
    with pytest.raises(ValueError):
        VideoPreprocessor().process(VideoPreprocessRequest(file_path=str(tmp_path / "nope.mp4")))
