from bagimages.sensor_msgs.header import Header, decode_header
from bagimages.sensor_msgs.image import Image, decode_image, decode_image_message
