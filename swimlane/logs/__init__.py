from swimlane.logs.server_log import api_logger
from swimlane.logs.debug_log import debug_logger, log_function
