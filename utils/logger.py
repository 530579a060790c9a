import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional


class DiscordLogger:
    """自定義日誌系統"""

    def __init__(self, log_file: Optional[str] = "bot.log", level: int = logging.INFO):
        self.logger = logging.getLogger('WakeBot')
        self.logger.setLevel(level)

        # 避免重複添加處理器
        if not self.logger.handlers:
            # 設置格式
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

            # 設置文件處理器（帶輪換），log_file 為空時只輸出到控制台
            if log_file:
                file_handler = RotatingFileHandler(
                    log_file,
                    maxBytes=1024*1024,  # 1MB
                    backupCount=5,
                    encoding='utf-8'
                )
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            # 設置控制台處理器
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

    def info(self, message: str):
        """記錄信息級別日誌"""
        self.logger.info(message)

    def warning(self, message: str):
        """記錄警告級別日誌"""
        self.logger.warning(message)

    def error(self, message: str):
        """記錄錯誤級別日誌"""
        self.logger.error(message)

    def exception(self, message: str):
        """記錄錯誤級別日誌並附上堆疊"""
        self.logger.exception(message)

    def debug(self, message: str):
        """記錄調試級別日誌"""
        self.logger.debug(message)


_logger: Optional[DiscordLogger] = None


def get_logger() -> DiscordLogger:
    """獲取日誌實例（首次調用時創建）"""
    global _logger
    if _logger is None:
        _logger = DiscordLogger(log_file=os.getenv("LOG_FILE", "bot.log"))
    return _logger
