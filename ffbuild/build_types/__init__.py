"""Models and exceptions shared by the ffbuild components"""
