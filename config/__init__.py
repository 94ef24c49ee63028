"""Process settings and the bundled configuration tree"""
