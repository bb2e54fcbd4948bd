fieldparams = {
    'bls12-381': {
        'modulus': 0x73eda753299d7d483339d80809a1d80553bda402fffe5bfeffffffff00000001,
        'byte_width': 32,
    },
    'bn128': {
        'modulus': 21888242871839275222246405745257275088548364400416034343698204186575808495617,
        'byte_width': 32,
    },
}
