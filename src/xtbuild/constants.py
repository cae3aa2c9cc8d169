"""Fixed names shared across xtbuild services."""

FOUNDATION_EXTENSION = "foundation-database"

CORE_EXTENSIONS_LOCATION = "/core-extensions"
XTUPLE_EXTENSIONS_LOCATION = "/xtuple-extensions"
PRIVATE_EXTENSIONS_LOCATION = "/private-extensions"
NPM_LOCATION = "npm"

# Extensions every fresh database gets, in load order.
DEFAULT_EXTENSION_NAMES = ("crm", "project", "sales", "billing", "purchasing", "oauth2")

NPM_PATH_MARKER = "node_modules"

REGISTRY_EXISTS_SQL = "select relname from pg_class where relname = 'ext'"
# plv8 must be initialized before xt.ext triggers fire
REGISTRY_INIT_SQL = "select xt.js_init()"
REGISTRY_PATCH_SQL = (
    "update xt.ext set ext_location = '/core-extensions' "
    "where ext_name = 'oauth2' and ext_location = '/xtuple-extensions'"
)
REGISTRY_SELECT_SQL = "select * from xt.ext order by ext_load_order"
