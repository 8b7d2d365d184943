"""Elements to build test cases for a :class:`tagger.app.Application`"""
