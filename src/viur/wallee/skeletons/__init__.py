from pathlib import Path

from viur.core import conf, translate
from viur.core.bones import BaseBone
from viur.core.skeleton import BaseSkeleton

# Before we can import any skeleton we must allow this dir in the viur-core
_dir = str(Path(__file__).parent)
if _dir not in conf.skeleton_search_path:
    conf.skeleton_search_path.append(_dir)
    conf.skeleton_search_path.append(
        _dir
        .replace(str(conf.instance.project_base_path), "")
        .replace(str(conf.instance.core_base_path), "")
    )

from .customer_token import CustomerTokenSkel
from .merchant_transaction import MerchantTransactionSkel

# Set translated description of the bones using a schema with the bone name
for _key, _value in locals().copy().items():
    if isinstance(_value, type) and issubclass(_value, BaseSkeleton) and _value.__module__.startswith("viur.wallee"):
        for _bone_name, _bone_instance in vars(_value).items():
            if isinstance(_bone_instance, BaseBone):
                _bone_instance.descr = translate(
                    f'viur.wallee.skeleton.{_value.__name__.removesuffix("Skel").lower()}.{_bone_name}',
                    _bone_name.replace("_", " ").capitalize(),
                )
