from bagimages.config.config import EXTRACT_CONFIG
