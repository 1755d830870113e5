def get_prefix(path):
    """Return the listing prefix for a path.

    The root (empty path) has no prefix. Any other path is stripped of
    trailing slashes and gets exactly one appended.
    """
    if path == "":
        return None
    return path.rstrip("/") + "/"
