import os
import sys
import logging

logging_str = "[%(asctime)s] {%(pathname)s:%(lineno)d} %(levelname)s - %(message)s"
logging_dir = os.path.join(os.path.dirname("/".join(os.path.abspath(__file__).split('/')[:-2])), "logs")
logging_path = os.path.join(logging_dir, "transcriptsummarizer.log")
if not os.path.exists(logging_dir):
    os.makedirs(logging_dir)
logging.basicConfig(
    level=logging.INFO,
    format=logging_str,
    handlers=[
        logging.FileHandler(logging_path, encoding="utf-8"),
        logging.StreamHandler(sys.stdout)
    ]
)

logging = logging.getLogger('transcriptsummarizer')
