from . import v0001_base, v0002_catalog

def migrate_if_needed(con):
    (ver,) = con.execute("PRAGMA user_version").fetchone()
    ver = int(ver or 0)

    if ver < 1:
        v0001_base.apply(con);  con.execute("PRAGMA user_version=1"); ver = 1
    if ver < 2:
        v0002_catalog.apply(con); con.execute("PRAGMA user_version=2"); ver = 2
    return ver
