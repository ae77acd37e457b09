# utils/payload_loader.py - logger helper and CSV loader for package picture manifests
import csv
import logging

PICTURE_COLUMNS = ("picture", "url", "Picture", "URL")


def get_logger(name: str = "tagias"):
    logger = logging.getLogger(name)
    if not [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def load_pictures_from_csv(csv_path, delimiter='\t'):
    """Return the picture URLs listed in a manifest file, in file order.

    The manifest needs a header row. The URL is taken from the first of the
    PICTURE_COLUMNS present, falling back to the first column.
    """
    pictures = []
    with open(csv_path, newline='', encoding='utf-8') as fh:
        reader = csv.DictReader(fh, delimiter=delimiter)
        if not reader.fieldnames:
            return pictures
        column = next((c for c in PICTURE_COLUMNS if c in reader.fieldnames), reader.fieldnames[0])
        for r in reader:
            value = (r.get(column) or '').strip()
            if value:
                pictures.append(value)
    return pictures
