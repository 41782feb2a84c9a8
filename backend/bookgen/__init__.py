"""BookGen - AI nonfiction book generator backend"""
