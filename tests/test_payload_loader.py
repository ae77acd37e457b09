import logging

from utils.payload_loader import get_logger, load_pictures_from_csv


def test_get_logger_installs_single_handler():
    logger = get_logger("tagias-test-logger")
    again = get_logger("tagias-test-logger")
    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_load_pictures_uses_picture_column(tmp_path):
    manifest = tmp_path / "pictures.tsv"
    manifest.write_text("id\tpicture\n1\tdog.8001.jpg\n2\t\n3\tdog.8003.jpg\n", encoding="utf-8")

    assert load_pictures_from_csv(manifest) == ["dog.8001.jpg", "dog.8003.jpg"]


def test_load_pictures_falls_back_to_first_column(tmp_path):
    manifest = tmp_path / "pictures.csv"
    manifest.write_text("image,comment\na.jpg,x\nb.jpg,y\n", encoding="utf-8")

    assert load_pictures_from_csv(manifest, delimiter=",") == ["a.jpg", "b.jpg"]


def test_load_pictures_empty_file(tmp_path):
    manifest = tmp_path / "empty.tsv"
    manifest.write_text("", encoding="utf-8")

    assert load_pictures_from_csv(manifest) == []


def test_get_logger_configures_library_logger_with_null_handler():
    library_logger = logging.getLogger("tagias-null-handler-test")
    library_logger.addHandler(logging.NullHandler())

    logger = get_logger("tagias-null-handler-test")

    assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
