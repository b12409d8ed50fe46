# logging.config.dictConfig settings for running the converter outside the CLI,
# e.g. under pytest. The CLI uses coloredlogs instead.
log_conf = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "conversion": {
            "format": "%(asctime)s %(levelname)-8s %(module)s: %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S",
        }
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "conversion",
            "stream": "ext://sys.stderr",
        }
    },
    "loggers": {
        # Per-entry skip reasons are logged at DEBUG
        "clinvar_vcf": {
            "level": "DEBUG",
            "handlers": ["stderr"],
            "propagate": True,  # caplog listens on the root logger
        }
    },
}
