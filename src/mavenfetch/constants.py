"""Constants used in the project."""


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    ID_DELIMITER = ":"
    DEFAULT_EXTENSION = "jar"
    DEFAULT_CLASSIFIER = ""
    POM_EXTENSION = "pom"
    SNAPSHOT_SUFFIX = "-SNAPSHOT"
    METADATA_FILE_NAME = "maven-metadata.xml"
    METADATA_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

    DEFAULT_LOCAL_REPOSITORY_NAME = "local"
    DEFAULT_LOCAL_REPOSITORY_DIR = "repository"
    SUPPORTED_SCHEMES = ("file", "http", "https")

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    USER_AGENT = "mavenfetch/0.1"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    DOWNLOAD_MAX_ATTEMPTS = 5
    DOWNLOAD_RETRY_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    # Artifacts smaller than this are treated as truncated downloads.
    MIN_ARTIFACT_BYTES = 100
