"""
Miscellaneous file helpers
"""

import hashlib


def file_sha256(file_path, block_size=1024 * 1024):
    """Compute the hex SHA-256 digest of a local file"""
    digest = hashlib.sha256()
    with open(file_path, 'rb') as f:
        for block in iter(lambda: f.read(block_size), b''):
            digest.update(block)
    return digest.hexdigest()


def read_file_range(file_path, start, end):
    """Read the inclusive byte window [start, end] of a file"""
    with open(file_path, 'rb') as f:
        f.seek(start)
        return f.read(end - start + 1)
