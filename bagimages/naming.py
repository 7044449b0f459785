# Turns a topic name into a snake_case name that is safe to use as a file name prefix.
#
# Leading slashes of the topic namespace are dropped, uppercase letters start a new
# word, and every other non alphanumeric character becomes an underscore:
#   "/cam/image"                      -> "cam_image"
#   "ImgAndroidBanner"                -> "img_android_banner"
#   "ic_24/paper_ID_leftAndroid 100%" -> "ic_24_paper_id_left_android_100_"
def to_resource_name(name: str) -> str:
    output = []
    prev_char_is_uppercase = False

    for i, ch in enumerate(name.lstrip("/")):
        if ch.isascii() and ch.isalnum():
            if not ch.isupper():
                output.append(ch)
                prev_char_is_uppercase = False
            else:
                if i > 0 and not prev_char_is_uppercase:
                    output.append("_")
                output.append(ch.lower())
                prev_char_is_uppercase = True
        else:
            output.append("_")
            prev_char_is_uppercase = True

    return "".join(output)
