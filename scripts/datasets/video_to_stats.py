import argparse
import asyncio
import logging
from pathlib import Path

from tqdm import tqdm

from app.domain.export.csv_export import SummaryTable
from app.schemas.analyze_dto import AnalyzeMovementRequest
from app.services.service_factory import create_movement_analysis_service
from app.storage.local_fs import LocalFS

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Videos -> keypoint movement stats table (CSV)")
    ap.add_argument("--root", type=str, help="영상이 들어있는 루트 디렉토리 (하위 폴더까지 스캔)")
    ap.add_argument("--files", nargs="*", default=[], help="분석할 영상 파일 목록")
    ap.add_argument("--out", default="data/output/stats_table.csv")
    ap.add_argument("--output-dir", dest="output_dir", help="세션별 CSV/JSON 저장 폴더 (기본: settings.OUTPUT_DIR)")
    ap.add_argument("--overlay", action="store_true", help="keypoint 오버레이 영상도 저장")
    ap.add_argument("--mirror", action="store_true")
    ap.add_argument("--score-threshold", dest="score_threshold", type=float, default=None)
    return ap.parse_args(argv)


def iter_videos(args):
    for f in args.files:
        yield Path(f)
    if args.root:
        yield from LocalFS(Path(args.root)).glob_videos()


def analyze_one(path: Path, args):
    # MediaPipe 모델은 분석이 끝나면 닫히므로 영상마다 새 서비스
    service = create_movement_analysis_service(
        score_threshold=args.score_threshold,
        output_dir=args.output_dir,
    )
    request = AnalyzeMovementRequest(
        file_path=str(path),
        video_file_name=path.name,
        mirror=args.mirror,
        render_overlay=args.overlay,
    )
    return asyncio.run(service.analyze(request))


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    if not args.root and not args.files:
        raise SystemExit("ERROR: --root 또는 --files 중 하나는 반드시 지정하세요.")

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)

    table = SummaryTable()
    failed = 0
    for path in tqdm(list(iter_videos(args)), desc="Analyzing"):
        try:
            result = analyze_one(path, args)
            # landmark 구성이 다른 영상(헤더 불일치)도 건너뛰고 계속
            table.append_row(result.summary.csv_header(), result.summary.csv_row())
        except (ValueError, RuntimeError) as e:
            failed += 1
            logger.warning(f"[WARN] fail: {path} -> {e}")

    if table.is_empty:
        raise SystemExit(f"ERROR: 분석된 영상이 없습니다 (failed={failed})")

    table.to_dataframe().to_csv(out, index=False)
    print(f"[OK] wrote {len(table)} rows -> {out} (failed={failed})")


if __name__ == "__main__":
    main()
