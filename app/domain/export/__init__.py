from .csv_export import (
    SummaryTable,
    keypoints_to_csv,
    summary_to_csv,
    summary_to_long_csv,
    keypoints_csv_name,
    keypoints_json_name,
    stats_csv_name,
    TABLE_DOWNLOAD_NAME,
)
