# Generated staff directory modules live here, see staff_relay.scripts.build_directory
