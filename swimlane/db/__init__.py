from swimlane.db.proxy import QueryProxy, RemoteQueryProxy, SQLAlchemyQueryProxy
from swimlane.db.database import create_query_proxy, get_query_proxy, init_db
