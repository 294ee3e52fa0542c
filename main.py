"""Binary logger demo — writes a short sequence of records, then exits on FATAL."""

import logging
import sys

from tlvlog.binlog import BinLogger
from tlvlog.config import load_config


def main(argv=None):
    config = load_config(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s [tlvlog] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)
    logger.info("Writing to %s (errors: %s), level=%s",
                config.log_file, config.err_file or config.log_file, config.min_level.name)

    blog = BinLogger(config.log_file, config.err_file,
                     truncate=config.truncate, level=config.min_level)
    if not blog.good():
        logger.error("Binary logger unavailable: %s", blog.status.value)
        sys.exit(1)

    blog.debug("main", "starts")
    attrs = {f"argv[{i}]": value
             for i, value in enumerate(config.args, start=config.first_arg_index)}
    blog.info("main", "starts", attrs)
    blog.warn("main", "depleted")
    if not blog.good():
        logger.error("Binary logger failed: %s", blog.status.value)
    blog.fatal("main", "ends")


if __name__ == "__main__":
    main()
