from enum import Enum

from env_utils import parse_bool_env

class LogChannel(Enum):
    GLOBAL = "GLOBAL"
    INGEST = "INGEST"
    VIDEO = "VIDEO"
    INFERENCE = "INFERENCE"
    RENDER = "RENDER"


class LogLevel(Enum):
    INFO = "INFO"
    WARNING = "WARN"
    ERROR = "ERROR"
    DEBUG = "DEBUG"


class FilteredLogger:
    def __init__(self):
        self.extreme_debug = parse_bool_env('MEDIA_DEBUG', '0')
        self.ingest_debug = parse_bool_env('INGEST_DEBUG_LOGS', '0')
        self.video_debug = parse_bool_env('VIDEO_DEBUG_LOGS', '0')
        self.inference_debug = parse_bool_env('INFERENCE_DEBUG_LOGS', '0')
        self.render_debug = parse_bool_env('RENDER_DEBUG_LOGS', '0')

    def configure(self, *, extreme_debug=None, ingest_debug=None, video_debug=None,
                  inference_debug=None, render_debug=None):
        if extreme_debug is not None:
            self.extreme_debug = extreme_debug
        if ingest_debug is not None:
            self.ingest_debug = ingest_debug
        if video_debug is not None:
            self.video_debug = video_debug
        if inference_debug is not None:
            self.inference_debug = inference_debug
        if render_debug is not None:
            self.render_debug = render_debug

    def should_log_debug(self, channel):
        if self.extreme_debug:
            return True
        if channel == LogChannel.GLOBAL:
            return self.ingest_debug or self.video_debug or self.inference_debug or self.render_debug
        if channel == LogChannel.INGEST:
            return self.ingest_debug
        if channel == LogChannel.VIDEO:
            return self.video_debug
        if channel == LogChannel.INFERENCE:
            return self.inference_debug
        if channel == LogChannel.RENDER:
            return self.render_debug
        return False

    def _print(self, level, channel, message):
        prefix = f"[{level.value}]"
        channel_tag = f"[{channel.value}]"
        for line in str(message).splitlines():
            print(f"{prefix} {channel_tag} {line}")

    def info(self, channel, message):
        self._print(LogLevel.INFO, channel, message)

    def warning(self, channel, message):
        self._print(LogLevel.WARNING, channel, message)

    def error(self, channel, message):
        self._print(LogLevel.ERROR, channel, message)

    def debug(self, channel, message):
        if not self.should_log_debug(channel):
            return
        self._print(LogLevel.DEBUG, channel, message)


_shared_logger = FilteredLogger()


def configure_logger(**kwargs):
    _shared_logger.configure(**kwargs)


def should_log_debug(channel):
    return _shared_logger.should_log_debug(channel)


def info(channel, message):
    _shared_logger.info(channel, message)


def warning(channel, message):
    _shared_logger.warning(channel, message)


def error(channel, message):
    _shared_logger.error(channel, message)


def debug(channel, message):
    _shared_logger.debug(channel, message)
