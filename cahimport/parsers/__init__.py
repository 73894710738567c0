from cahimport.parsers.content_pack import parse_content_pack, read_content_pack

__all__ = ["parse_content_pack", "read_content_pack"]
