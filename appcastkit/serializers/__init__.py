# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Appcast file formats for appcastkit.

Available formats:

- xml: Sparkle-compatible RSS appcast
- json: JSON appcast

Example:
    ```python
    from appcastkit.serializers import get_serializer

    serializer = get_serializer("json", human_readable=False)
    print(serializer.extension)  # json
    ```
"""

# Import format modules to trigger self-registration
from . import (
    json_format,  # noqa: F401
    xml_format,  # noqa: F401
)
from .base import (
    AppcastSerializer,
    available_formats,
    get_serializer,
    register_serializer,
)
from .json_format import JsonAppcastSerializer
from .xml_format import XmlAppcastSerializer

__all__ = [
    "AppcastSerializer",
    "JsonAppcastSerializer",
    "XmlAppcastSerializer",
    "available_formats",
    "get_serializer",
    "register_serializer",
]
