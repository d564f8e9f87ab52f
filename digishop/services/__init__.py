"""Shop services; each one takes the Database gateway in its constructor"""
